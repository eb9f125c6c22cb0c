"""Pydantic models."""

from app.models.recipe import (
    GenerateRecipeRequest,
    FavoriteData,
    FavoriteResponse,
    GenerationRequest,
    Ingredient,
    IngredientSummary,
    MessageResponse,
    NutritionalInfo,
    Pagination,
    Recipe,
    RecipeData,
    RecipeIngredientSpec,
    RecipeListData,
    RecipeListResponse,
    RecipePreferences,
    RecipeResponse,
    StoredRecipe,
    StoredRecipeIngredient,
)

__all__ = [
    "GenerateRecipeRequest",
    "FavoriteData",
    "FavoriteResponse",
    "GenerationRequest",
    "Ingredient",
    "IngredientSummary",
    "MessageResponse",
    "NutritionalInfo",
    "Pagination",
    "Recipe",
    "RecipeData",
    "RecipeIngredientSpec",
    "RecipeListData",
    "RecipeListResponse",
    "RecipePreferences",
    "RecipeResponse",
    "StoredRecipe",
    "StoredRecipeIngredient",
]
