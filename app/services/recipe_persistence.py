"""Maps an accepted Recipe onto the recipe, ingredient and association tables."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.db.database import RecipeIngredientRecord, RecipeRecord
from app.models.recipe import (
    Ingredient,
    IngredientSummary,
    NutritionalInfo,
    Recipe,
    RecipeIngredientSpec,
    StoredRecipe,
    StoredRecipeIngredient,
)
from app.services.ingredient_catalog import IngredientCatalog, SqlIngredientCatalog
from app.utils.exceptions import PersistenceError

logger = logging.getLogger(__name__)

STEP_SEPARATOR = "\n\n"
NEW_INGREDIENT_CATEGORY = "other"
DEFAULT_UNIT = "piece"

_UNICODE_FRACTIONS = {"½": 0.5, "⅓": 1 / 3, "⅔": 2 / 3, "¼": 0.25, "¾": 0.75, "⅛": 0.125}
_MIXED = re.compile(r"^\s*(\d+)\s+(\d+)\s*/\s*(\d+)")
_FRACTION = re.compile(r"^\s*(\d+)\s*/\s*(\d+)")
_DECIMAL = re.compile(r"^\s*(\d+(?:[.,]\d+)?)\s*([½⅓⅔¼¾⅛])?")


def parse_quantity(amount: Optional[str]) -> Optional[float]:
    """
    Parse the numeric part of an amount string.

    Supports "2", "1.5", "1,5", "1/2", "1 1/2", "½" and "1½"; text after the
    number is ignored ("2 large" -> 2.0). Returns None when nothing numeric leads.
    """
    if not amount:
        return None
    text = amount.strip()

    m = _MIXED.match(text)
    if m:
        whole, num, den = (int(g) for g in m.groups())
        return whole + num / den if den else None

    m = _FRACTION.match(text)
    if m:
        num, den = int(m.group(1)), int(m.group(2))
        return num / den if den else None

    m = _DECIMAL.match(text)
    if m:
        value = float(m.group(1).replace(",", "."))
        if m.group(2):
            value += _UNICODE_FRACTIONS[m.group(2)]
        return value

    if text[:1] in _UNICODE_FRACTIONS:
        return _UNICODE_FRACTIONS[text[:1]]
    return None


def to_stored_recipe(
    record: RecipeRecord,
    links: Iterable[Tuple[RecipeIngredientRecord, IngredientSummary]],
    is_favorite: bool = False,
    favorite_count: int = 0,
) -> StoredRecipe:
    """Hydrate a recipe row and its association rows into the response shape."""
    return StoredRecipe(
        id=record.id,
        title=record.title,
        description=record.description,
        instructions=record.instructions,
        prepTime=record.prep_time,
        cookTime=record.cook_time,
        servings=record.servings,
        difficulty=record.difficulty,
        cuisine=record.cuisine,
        tags=list(record.tags or []),
        nutritionalInfo=NutritionalInfo(**(record.nutritional_info or {})),
        isAiGenerated=record.is_ai_generated,
        aiPrompt=record.ai_prompt,
        createdBy=record.created_by,
        createdAt=record.created_at,
        recipeIngredients=[
            StoredRecipeIngredient(
                id=link.id,
                recipeId=link.recipe_id,
                ingredientId=link.ingredient_id,
                quantity=link.quantity,
                unit=link.unit,
                optional=link.optional,
                substitutions=list(link.substitutions or []),
                ingredient=IngredientSummary(id=ing.id, name=ing.name, category=ing.category),
            )
            for link, ing in links
        ],
        isFavorite=is_favorite,
        favoriteCount=favorite_count,
    )


class RecipePersistenceMapper:
    """
    Stores one generated recipe as a single transaction.

    Steps run strictly in order inside the session's transaction: recipe row,
    then for each ingredient spec a catalog lookup (creating unseen ingredients)
    and an association row. Any failure rolls the whole unit back, so a recipe
    is never left with a partial ingredient list.
    """

    def __init__(self, session: Session, catalog: Optional[IngredientCatalog] = None):
        self.session = session
        self.catalog = catalog if catalog is not None else SqlIngredientCatalog(session)

    def persist(self, recipe: Recipe, owner_id: int, prompt_audit: str) -> StoredRecipe:
        try:
            record = RecipeRecord(
                title=recipe.title,
                description=recipe.description,
                instructions=STEP_SEPARATOR.join(recipe.instructions),
                prep_time=recipe.prepTime,
                cook_time=recipe.cookTime,
                servings=recipe.servings,
                difficulty=recipe.difficulty,
                cuisine=recipe.cuisine,
                tags=list(recipe.tags),
                nutritional_info=recipe.nutritionalInfo.model_dump(),
                is_ai_generated=True,
                ai_prompt=prompt_audit,
                created_by=owner_id,
            )
            self.session.add(record)
            self.session.flush()

            links: List[Tuple[RecipeIngredientRecord, Ingredient]] = []
            for spec in recipe.ingredients:
                ingredient = self._resolve_ingredient(spec)
                link = RecipeIngredientRecord(
                    recipe_id=record.id,
                    ingredient_id=ingredient.id,
                    quantity=parse_quantity(spec.amount),
                    unit=spec.unit,
                    optional=spec.optional,
                    substitutions=[],
                )
                self.session.add(link)
                links.append((link, ingredient))

            self.session.flush()
            stored = to_stored_recipe(record, links)
            self.session.commit()
        except Exception as e:
            # any failure undoes the whole unit, including ingredients created on the way
            self.session.rollback()
            logger.error(
                "Failed to persist recipe %r for user %s: %s", recipe.title, owner_id, e, exc_info=True
            )
            raise PersistenceError(f"Failed to save recipe {recipe.title!r}") from e

        logger.info(
            "Stored recipe id=%s with %d ingredients for user %s",
            stored.id,
            len(stored.recipeIngredients),
            owner_id,
        )
        return stored

    def _resolve_ingredient(self, spec: RecipeIngredientSpec) -> Ingredient:
        ingredient = self.catalog.find_by_name_case_insensitive(spec.name)
        if ingredient is not None:
            return ingredient
        return self.catalog.create(
            spec.name,
            NEW_INGREDIENT_CATEGORY,
            [spec.unit or DEFAULT_UNIT],
        )
