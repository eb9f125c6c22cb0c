"""Generation request construction and the prompt contract sent to the model."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from app.models.recipe import DEFAULT_SERVINGS, GenerationRequest, RecipePreferences
from app.utils.exceptions import InvalidRequestError

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a professional chef and nutritionist. Generate practical, delicious recipes "
    "based on available ingredients. Always respond with valid JSON only, no additional text."
)

_WHITESPACE = re.compile(r"\s+")


def normalize_ingredient_name(name: str) -> str:
    """Case- and whitespace-insensitive key used for ingredient identity."""
    return _WHITESPACE.sub(" ", name).strip().lower()


def build_generation_request(
    ingredient_names: Iterable[str],
    preferences: Optional[RecipePreferences] = None,
) -> GenerationRequest:
    """
    Build a validated generation request.

    Names are deduplicated case-insensitively (first spelling wins, surrounding
    whitespace dropped). Servings fall back to 4 when absent or non-positive;
    the other preferences pass through untouched.

    Raises:
        InvalidRequestError: If no usable ingredient name is left.
    """
    seen = set()
    names: List[str] = []
    for raw in ingredient_names or []:
        if not isinstance(raw, str):
            continue
        key = normalize_ingredient_name(raw)
        if not key or key in seen:
            continue
        seen.add(key)
        names.append(_WHITESPACE.sub(" ", raw).strip())

    if not names:
        raise InvalidRequestError("At least one ingredient is required to generate a recipe")

    prefs = preferences or RecipePreferences()
    servings = prefs.servings if prefs.servings and prefs.servings > 0 else DEFAULT_SERVINGS

    request = GenerationRequest(
        ingredients=names,
        dietaryRestrictions=prefs.dietaryRestrictions,
        cuisine=prefs.cuisine,
        servings=servings,
        maxPrepTime=prefs.maxPrepTime,
    )
    logger.debug("Built generation request with %d ingredients", len(names))
    return request


def build_prompt(request: GenerationRequest) -> str:
    """Render the user prompt; optional requirements only appear when set."""
    requirements = [f"- Servings: {request.servings}"]
    if request.maxPrepTime:
        requirements.append(f"- Maximum prep time: {request.maxPrepTime} minutes")
    if request.dietaryRestrictions:
        requirements.append(f"- Dietary restrictions: {', '.join(request.dietaryRestrictions)}")
    if request.cuisine:
        requirements.append(f"- Cuisine style: {request.cuisine}")

    requirements_text = "\n".join(requirements)
    return f"""
Generate a recipe using these available ingredients: {", ".join(request.ingredients)}.

Requirements:
{requirements_text}

Instructions:
1. Use as many of the provided ingredients as possible
2. You may suggest additional common pantry ingredients (salt, pepper, oil, etc.)
3. Make it practical and delicious
4. Include accurate nutritional estimates

Return JSON in this exact format:
{{
  "title": "Recipe Name",
  "description": "Brief appetizing description (1-2 sentences)",
  "instructions": ["step 1", "step 2", "step 3"],
  "ingredients": [
    {{"name": "ingredient name", "amount": "1", "unit": "cup", "optional": false}}
  ],
  "prepTime": 15,
  "cookTime": 25,
  "servings": {request.servings},
  "difficulty": "easy",
  "cuisine": "cuisine type or null",
  "tags": ["tag1", "tag2"],
  "nutritionalInfo": {{
    "calories": 350,
    "protein": "25g",
    "carbs": "30g",
    "fat": "15g",
    "fiber": "5g"
  }}
}}
""".strip()
