"""End-to-end tests for creating a stored recipe from ingredient ids."""

import asyncio

import pytest
from sqlalchemy import func, select

from app.db.database import RecipeRecord
from app.models.recipe import RecipePreferences
from app.services.ingredient_catalog import SqlIngredientCatalog
from app.services.recipe_generator import RecipeGenerator
from app.services.recipe_pipeline import RecipePipeline
from app.utils.exceptions import CatalogError, InvalidRequestError, PersistenceError


def _pipeline(client, session_factory, **kwargs) -> RecipePipeline:
    return RecipePipeline(RecipeGenerator(client), session_factory, **kwargs)


def test_failed_generation_stores_fallback(session_factory, seeded_ids, scripted_client):
    client = scripted_client(response="Sorry, I can't help with that.")
    pipeline = _pipeline(client, session_factory)

    stored = asyncio.run(
        pipeline.create_recipe(
            3,
            [seeded_ids["Chicken Breast"], seeded_ids["Rice"]],
            RecipePreferences(servings=2),
        )
    )

    assert stored.title == "Simple Chicken Breast Recipe"
    assert stored.servings == 2
    assert stored.difficulty == "easy"
    assert stored.isAiGenerated is True
    assert stored.createdBy == 3
    assert "Chicken Breast, Rice" in stored.aiPrompt
    assert [link.ingredientId for link in stored.recipeIngredients] == [
        seeded_ids["Chicken Breast"],
        seeded_ids["Rice"],
    ]
    assert all(link.unit == "portion" and link.quantity == 1.0 for link in stored.recipeIngredients)


def test_generation_request_uses_catalog_names(session_factory, seeded_ids, scripted_client):
    client = scripted_client(response="{}")
    pipeline = _pipeline(client, session_factory)

    asyncio.run(pipeline.create_recipe(1, [seeded_ids["Tofu"], seeded_ids["Tofu"], 4242]))

    assert client.calls[0].ingredients == ["Tofu"]
    assert client.calls[0].servings == 4


@pytest.mark.parametrize("ids", [[], [9998, 9999]])
def test_nothing_to_generate_from_is_invalid(session_factory, seeded_ids, scripted_client, ids):
    client = scripted_client(response="{}")
    pipeline = _pipeline(client, session_factory)

    with pytest.raises(InvalidRequestError):
        asyncio.run(pipeline.create_recipe(1, ids))
    assert client.calls == []


class FailingCatalog(SqlIngredientCatalog):
    def find_by_name_case_insensitive(self, name):
        raise CatalogError("catalog offline")


def test_storage_failure_surfaces(session_factory, seeded_ids, scripted_client):
    client = scripted_client(response="Sorry, I can't help with that.")
    pipeline = _pipeline(client, session_factory, catalog_factory=FailingCatalog)

    with pytest.raises(PersistenceError):
        asyncio.run(pipeline.create_recipe(1, [seeded_ids["Eggs"]]))

    with session_factory() as session:
        assert session.execute(select(func.count()).select_from(RecipeRecord)).scalar_one() == 0
