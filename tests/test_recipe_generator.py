"""Tests for the generate-then-fallback flow."""

import asyncio
import json

import pytest

from app.models.recipe import RecipePreferences
from app.services.fallback import FALLBACK_INSTRUCTIONS, build_fallback_recipe
from app.services.recipe_generator import GenerationOutcome, RecipeGenerator
from app.services.request_builder import build_generation_request
from app.utils.exceptions import (
    EmptyResponseError,
    GenerationServiceError,
    ServiceUnavailableError,
)

GOOD_RESPONSE = json.dumps(
    {
        "title": "Chicken Fried Rice",
        "description": "Weeknight fried rice.",
        "instructions": ["Cook rice.", "Fry chicken.", "Combine."],
        "ingredients": [
            {"name": "Chicken Breast", "amount": "1", "unit": "pound", "optional": False},
            {"name": "Rice", "amount": "2", "unit": "cups", "optional": False},
        ],
        "prepTime": 10,
        "cookTime": 15,
        "servings": 2,
        "difficulty": "easy",
        "cuisine": "chinese",
        "tags": ["quick"],
        "nutritionalInfo": {"calories": 480, "protein": "35g", "carbs": "50g", "fat": "14g", "fiber": "2g"},
    }
)


@pytest.fixture
def chicken_rice_request():
    return build_generation_request(["Chicken Breast", "Rice"], RecipePreferences(servings=2))


def test_fallback_is_deterministic(chicken_rice_request):
    assert build_fallback_recipe(chicken_rice_request) == build_fallback_recipe(chicken_rice_request)


def test_fallback_contents(chicken_rice_request):
    recipe = build_fallback_recipe(chicken_rice_request)

    assert recipe.title == "Simple Chicken Breast Recipe"
    assert recipe.description == "A quick and easy recipe using Chicken Breast, Rice."
    assert recipe.instructions == list(FALLBACK_INSTRUCTIONS)
    assert len(recipe.instructions) == 5
    assert [(i.name, i.amount, i.unit) for i in recipe.ingredients] == [
        ("Chicken Breast", "1", "portion"),
        ("Rice", "1", "portion"),
    ]
    assert recipe.servings == 2
    assert recipe.difficulty == "easy"
    assert recipe.cuisine == "fusion"
    assert recipe.nutritionalInfo.calories == 250


def test_fallback_description_uses_first_three_names():
    request = build_generation_request(["Eggs", "Rice", "Tofu", "Olive Oil"])
    recipe = build_fallback_recipe(request)
    assert recipe.description == "A quick and easy recipe using Eggs, Rice, Tofu."
    assert len(recipe.ingredients) == 4


def test_successful_generation_is_returned(chicken_rice_request, scripted_client):
    client = scripted_client(response=GOOD_RESPONSE)
    recipe = asyncio.run(RecipeGenerator(client).generate(chicken_rice_request))

    assert recipe.title == "Chicken Fried Rice"
    assert recipe.cuisine == "chinese"
    assert client.calls == [chicken_rice_request]


def test_non_json_response_falls_back(chicken_rice_request, scripted_client):
    client = scripted_client(response="Sorry, I can't help with that.")
    recipe = asyncio.run(RecipeGenerator(client).generate(chicken_rice_request))

    assert recipe.title == "Simple Chicken Breast Recipe"
    assert recipe.servings == 2
    assert len(recipe.ingredients) == 2
    assert recipe.difficulty == "easy"


@pytest.mark.parametrize(
    "error",
    [
        ServiceUnavailableError("timed out"),
        GenerationServiceError("Gemini API error 500: internal"),
        EmptyResponseError("empty"),
        RuntimeError("boom"),
    ],
)
def test_adapter_errors_fall_back(chicken_rice_request, scripted_client, error):
    client = scripted_client(error=error)
    recipe = asyncio.run(RecipeGenerator(client).generate(chicken_rice_request))
    assert recipe == build_fallback_recipe(chicken_rice_request)


@pytest.mark.parametrize(
    "script, kind",
    [
        ({"error": ServiceUnavailableError("down")}, "service_unavailable"),
        ({"error": GenerationServiceError("bad request")}, "service_error"),
        ({"error": EmptyResponseError("empty")}, "empty_response"),
        ({"response": "not json"}, "malformed_output"),
        ({"error": KeyError("x")}, "unexpected"),
    ],
)
def test_try_generate_reports_failure_kind(chicken_rice_request, scripted_client, script, kind):
    client = scripted_client(**script)
    outcome = asyncio.run(RecipeGenerator(client).try_generate(chicken_rice_request))

    assert not outcome.succeeded
    assert outcome.recipe is None
    assert outcome.failure.kind == kind


def test_try_generate_success_has_no_failure(chicken_rice_request, scripted_client):
    client = scripted_client(response=GOOD_RESPONSE)
    outcome = asyncio.run(RecipeGenerator(client).try_generate(chicken_rice_request))

    assert outcome.succeeded
    assert outcome.failure is None


def test_or_else_only_calls_fallback_on_failure(chicken_rice_request):
    fallback = build_fallback_recipe(chicken_rice_request)
    calls = []

    def make_fallback():
        calls.append(1)
        return fallback

    generated = fallback.model_copy(update={"title": "Generated"})
    assert GenerationOutcome(recipe=generated).or_else(make_fallback) is generated
    assert calls == []
    assert GenerationOutcome().or_else(make_fallback) is fallback
    assert calls == [1]
