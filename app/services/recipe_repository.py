"""Read, favorite and delete access to a user's stored recipes."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Set, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.db.database import FavoriteRecipeRecord, RecipeIngredientRecord, RecipeRecord
from app.models.recipe import StoredRecipe
from app.services.recipe_persistence import to_stored_recipe
from app.utils.exceptions import PersistenceError, RecipeNotFoundError

logger = logging.getLogger(__name__)


class RecipeRepository:
    """Owner-scoped queries over stored recipes."""

    def __init__(self, session: Session):
        self.session = session

    def _owned(self, owner_id: int):
        return (
            select(RecipeRecord)
            .where(RecipeRecord.created_by == owner_id)
            .options(selectinload(RecipeRecord.recipe_ingredients).selectinload(RecipeIngredientRecord.ingredient))
        )

    def _require_owned(self, recipe_id: int, owner_id: int) -> None:
        exists = self.session.execute(
            select(RecipeRecord.id).where(RecipeRecord.id == recipe_id, RecipeRecord.created_by == owner_id)
        ).scalar_one_or_none()
        if exists is None:
            raise RecipeNotFoundError(f"Recipe {recipe_id} not found")

    def _favorite_counts(self, recipe_ids: Iterable[int]) -> Dict[int, int]:
        rows = self.session.execute(
            select(FavoriteRecipeRecord.recipe_id, func.count())
            .where(FavoriteRecipeRecord.recipe_id.in_(list(recipe_ids)))
            .group_by(FavoriteRecipeRecord.recipe_id)
        ).all()
        return {recipe_id: count for recipe_id, count in rows}

    def _favorited_by(self, user_id: int, recipe_ids: Iterable[int]) -> Set[int]:
        return set(
            self.session.execute(
                select(FavoriteRecipeRecord.recipe_id).where(
                    FavoriteRecipeRecord.user_id == user_id,
                    FavoriteRecipeRecord.recipe_id.in_(list(recipe_ids)),
                )
            ).scalars()
        )

    def _hydrate_all(self, records: List[RecipeRecord], owner_id: int) -> List[StoredRecipe]:
        ids = [r.id for r in records]
        counts = self._favorite_counts(ids) if ids else {}
        favorited = self._favorited_by(owner_id, ids) if ids else set()
        return [
            to_stored_recipe(
                r,
                [(link, link.ingredient) for link in r.recipe_ingredients],
                is_favorite=r.id in favorited,
                favorite_count=counts.get(r.id, 0),
            )
            for r in records
        ]

    def get_for_owner(self, recipe_id: int, owner_id: int) -> StoredRecipe:
        record = self.session.execute(
            self._owned(owner_id).where(RecipeRecord.id == recipe_id)
        ).scalar_one_or_none()
        if record is None:
            raise RecipeNotFoundError(f"Recipe {recipe_id} not found")
        return self._hydrate_all([record], owner_id)[0]

    def list_for_owner(self, owner_id: int, page: int = 1, limit: int = 10) -> Tuple[List[StoredRecipe], int]:
        """One page of the owner's recipes, newest first, plus the total count."""
        page = max(page, 1)
        limit = max(limit, 1)
        records = self.session.execute(
            self._owned(owner_id)
            .order_by(RecipeRecord.created_at.desc(), RecipeRecord.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars().all()
        total = self.session.execute(
            select(func.count()).select_from(RecipeRecord).where(RecipeRecord.created_by == owner_id)
        ).scalar_one()
        return self._hydrate_all(list(records), owner_id), total

    def toggle_favorite(self, recipe_id: int, owner_id: int) -> bool:
        """
        Add the recipe to the owner's favorites, or remove it if already there.

        Returns:
            True if the recipe is a favorite after the call

        Raises:
            RecipeNotFoundError: If the recipe does not exist or belongs to someone else
        """
        self._require_owned(recipe_id, owner_id)

        try:
            existing = self.session.execute(
                select(FavoriteRecipeRecord).where(
                    FavoriteRecipeRecord.user_id == owner_id,
                    FavoriteRecipeRecord.recipe_id == recipe_id,
                )
            ).scalar_one_or_none()
            if existing is not None:
                self.session.delete(existing)
                is_favorite = False
            else:
                self.session.add(FavoriteRecipeRecord(user_id=owner_id, recipe_id=recipe_id))
                is_favorite = True
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to toggle favorite for recipe %s: %s", recipe_id, e, exc_info=True)
            raise PersistenceError(f"Failed to update favorite for recipe {recipe_id}") from e

        logger.info("Recipe id=%s favorite=%s for user %s", recipe_id, is_favorite, owner_id)
        return is_favorite

    def delete_for_owner(self, recipe_id: int, owner_id: int) -> None:
        """Delete a recipe; favorites and association rows go first to keep foreign keys valid."""
        self._require_owned(recipe_id, owner_id)

        try:
            self.session.execute(delete(FavoriteRecipeRecord).where(FavoriteRecipeRecord.recipe_id == recipe_id))
            self.session.execute(delete(RecipeIngredientRecord).where(RecipeIngredientRecord.recipe_id == recipe_id))
            self.session.execute(delete(RecipeRecord).where(RecipeRecord.id == recipe_id))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to delete recipe %s: %s", recipe_id, e, exc_info=True)
            raise PersistenceError(f"Failed to delete recipe {recipe_id}") from e

        logger.info("Deleted recipe id=%s for user %s", recipe_id, owner_id)
