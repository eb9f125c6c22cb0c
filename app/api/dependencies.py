"""Shared API dependencies."""

from functools import lru_cache
from typing import Callable

from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.database import SessionLocal, get_db
from app.services.gemini_service import GeminiGenerationClient, GenerationClient
from app.services.recipe_generator import RecipeGenerator
from app.services.recipe_pipeline import RecipePipeline
from app.services.recipe_repository import RecipeRepository


@lru_cache(maxsize=1)
def get_generation_client() -> GenerationClient:
    """Shared Gemini client (created lazily, reused across requests)."""
    return GeminiGenerationClient()


def get_session_factory() -> Callable[[], Session]:
    return SessionLocal


def get_recipe_pipeline(
    client: GenerationClient = Depends(get_generation_client),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> RecipePipeline:
    """Get recipe pipeline instance."""
    return RecipePipeline(RecipeGenerator(client), session_factory)


def get_recipe_repository(db: Session = Depends(get_db)) -> RecipeRepository:
    return RecipeRepository(db)
