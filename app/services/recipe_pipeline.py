"""End-to-end recipe creation: catalog lookup, generation, persistence."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from sqlalchemy.orm import Session

from app.models.recipe import Recipe, RecipePreferences, StoredRecipe
from app.services.ingredient_catalog import IngredientCatalog, SqlIngredientCatalog
from app.services.recipe_generator import RecipeGenerator
from app.services.recipe_persistence import RecipePersistenceMapper
from app.services.request_builder import build_generation_request, build_prompt
from app.utils.exceptions import CatalogError, PersistenceError

logger = logging.getLogger(__name__)


class RecipePipeline:
    """
    Creates a stored recipe from the ingredient ids a user owns.

    Only two errors leave this class: InvalidRequestError when there is
    nothing to generate from, and PersistenceError when storage fails.
    Generation faults are absorbed by the generator's fallback.

    Database work runs in worker threads with a fresh session per step; each
    step is awaited before the next one starts.
    """

    def __init__(
        self,
        generator: RecipeGenerator,
        session_factory: Callable[[], Session],
        catalog_factory: Callable[[Session], IngredientCatalog] = SqlIngredientCatalog,
    ):
        self.generator = generator
        self.session_factory = session_factory
        self.catalog_factory = catalog_factory

    async def create_recipe(
        self,
        owner_id: int,
        ingredient_ids: Sequence[int],
        preferences: Optional[RecipePreferences] = None,
    ) -> StoredRecipe:
        names = await asyncio.to_thread(self._resolve_names, ingredient_ids)
        request = build_generation_request(names, preferences)

        recipe = await self.generator.generate(request)
        prompt = build_prompt(request)

        return await asyncio.to_thread(self._persist, recipe, owner_id, prompt)

    def _resolve_names(self, ingredient_ids: Sequence[int]) -> List[str]:
        with self.session_factory() as session:
            try:
                return SqlIngredientCatalog(session).resolve_names(ingredient_ids)
            except CatalogError as e:
                logger.error("Ingredient lookup failed: %s", e, exc_info=True)
                raise PersistenceError("Failed to look up selected ingredients") from e

    def _persist(self, recipe: Recipe, owner_id: int, prompt: str) -> StoredRecipe:
        with self.session_factory() as session:
            mapper = RecipePersistenceMapper(session, self.catalog_factory(session))
            return mapper.persist(recipe, owner_id, prompt)
