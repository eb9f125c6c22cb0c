"""Tests for generation request construction and the prompt contract."""

import pytest

from app.models.recipe import RecipePreferences
from app.services.request_builder import build_generation_request, build_prompt
from app.utils.exceptions import InvalidRequestError


def test_empty_ingredients_rejected():
    with pytest.raises(InvalidRequestError):
        build_generation_request([])


def test_blank_ingredients_rejected():
    with pytest.raises(InvalidRequestError):
        build_generation_request(["", "   "])


def test_case_and_whitespace_duplicates_collapse():
    request = build_generation_request(["Egg", "egg", " Egg "])
    assert request.ingredients == ["Egg"]


def test_first_seen_order_preserved():
    request = build_generation_request(["Rice", "tofu", "RICE", "Tofu", "Chicken  Breast"])
    assert request.ingredients == ["Rice", "tofu", "Chicken Breast"]


def test_servings_default_when_absent():
    assert build_generation_request(["Rice"]).servings == 4


@pytest.mark.parametrize("servings", [0, -3])
def test_servings_default_when_not_positive(servings):
    request = build_generation_request(["Rice"], RecipePreferences(servings=servings))
    assert request.servings == 4


def test_preferences_pass_through():
    prefs = RecipePreferences(
        dietaryRestrictions=["Vegan", "Gluten-Free"],
        cuisine="thai",
        servings=2,
        maxPrepTime=20,
    )
    request = build_generation_request(["Tofu"], prefs)
    assert request.dietaryRestrictions == ["Vegan", "Gluten-Free"]
    assert request.cuisine == "thai"
    assert request.servings == 2
    assert request.maxPrepTime == 20


def test_prompt_omits_absent_constraints():
    prompt = build_prompt(build_generation_request(["Chicken Breast", "Rice"]))
    assert "Chicken Breast, Rice" in prompt
    assert "- Servings: 4" in prompt
    assert "Maximum prep time" not in prompt
    assert "Dietary restrictions" not in prompt
    assert "Cuisine style" not in prompt


def test_prompt_includes_present_constraints():
    prefs = RecipePreferences(dietaryRestrictions=["Vegan"], cuisine="thai", servings=2, maxPrepTime=20)
    prompt = build_prompt(build_generation_request(["Tofu"], prefs))
    assert "- Maximum prep time: 20 minutes" in prompt
    assert "- Dietary restrictions: Vegan" in prompt
    assert "- Cuisine style: thai" in prompt
    assert '"servings": 2' in prompt
