"""Ingredient catalog: the shared store of known ingredients keyed by case-insensitive name."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.database import IngredientRecord
from app.models.recipe import Ingredient
from app.services.request_builder import normalize_ingredient_name
from app.utils.exceptions import CatalogError

logger = logging.getLogger(__name__)


class IngredientCatalog(Protocol):
    """What the persistence mapper needs from the catalog."""

    def find_by_name_case_insensitive(self, name: str) -> Optional[Ingredient]:
        ...

    def create(self, name: str, category: str, units: List[str]) -> Ingredient:
        """Create an ingredient, or return the existing one if the name is taken."""
        ...


def to_ingredient(record: IngredientRecord) -> Ingredient:
    return Ingredient(
        id=record.id,
        name=record.name,
        category=record.category,
        commonUnits=list(record.common_units or []),
    )


class SqlIngredientCatalog:
    """Catalog backed by the ``ingredients`` table.

    Works inside the caller's session so that ingredients created while
    persisting a recipe commit or roll back together with it.
    """

    def __init__(self, session: Session):
        self.session = session

    def find_by_name_case_insensitive(self, name: str) -> Optional[Ingredient]:
        record = self._find_record(normalize_ingredient_name(name))
        return to_ingredient(record) if record is not None else None

    def create(self, name: str, category: str, units: List[str]) -> Ingredient:
        """
        Race-safe insert.

        The insert runs in a SAVEPOINT; if a concurrent transaction already
        committed the same normalized name, the unique constraint rejects it
        and the existing row is returned instead.
        """
        key = normalize_ingredient_name(name)
        record = IngredientRecord(
            name=" ".join(name.split()),
            name_normalized=key,
            category=category,
            common_units=list(units),
        )
        try:
            with self.session.begin_nested():
                self.session.add(record)
        except IntegrityError:
            existing = self._find_record(key)
            if existing is None:
                raise CatalogError(f"Could not create or find ingredient {name!r}")
            logger.info("Ingredient %r was created concurrently, reusing id=%s", name, existing.id)
            return to_ingredient(existing)
        except SQLAlchemyError as e:
            raise CatalogError(f"Failed to create ingredient {name!r}: {e}") from e

        logger.info("Created catalog ingredient %r (id=%s, category=%s)", record.name, record.id, category)
        return to_ingredient(record)

    def resolve_names(self, ingredient_ids: Iterable[int]) -> List[str]:
        """Names for the given ids, in input order; unknown ids are skipped."""
        ids = list(ingredient_ids)
        if not ids:
            return []
        try:
            rows = self.session.execute(
                select(IngredientRecord.id, IngredientRecord.name).where(IngredientRecord.id.in_(ids))
            ).all()
        except SQLAlchemyError as e:
            raise CatalogError(f"Failed to resolve ingredient ids: {e}") from e

        names_by_id = {row.id: row.name for row in rows}
        unknown = [i for i in ids if i not in names_by_id]
        if unknown:
            logger.warning("Ignoring unknown ingredient ids: %s", unknown)
        return [names_by_id[i] for i in ids if i in names_by_id]

    def _find_record(self, key: str) -> Optional[IngredientRecord]:
        try:
            return self.session.execute(
                select(IngredientRecord).where(IngredientRecord.name_normalized == key)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise CatalogError(f"Failed to look up ingredient {key!r}: {e}") from e
