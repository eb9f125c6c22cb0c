"""Database engine, session factory and ORM models."""

from app.db.database import (
    Base,
    FavoriteRecipeRecord,
    IngredientRecord,
    RecipeIngredientRecord,
    RecipeRecord,
    SessionLocal,
    engine,
    get_db,
    init_db,
)

__all__ = [
    "Base",
    "FavoriteRecipeRecord",
    "IngredientRecord",
    "RecipeIngredientRecord",
    "RecipeRecord",
    "SessionLocal",
    "engine",
    "get_db",
    "init_db",
]
