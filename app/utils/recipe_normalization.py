"""Repair of model-generated recipe JSON into the canonical Recipe shape.

The repair rules live in one table (``_FIELD_RULES``): each canonical field is
looked up in the parsed tree (accepting a few alias keys) and passed through a
repair function that returns either the cleaned value or the field's default.
``normalize_recipe_data`` is total: any tree, even a non-dict, yields a
complete field set. Only ``parse_generation_output`` can fail, and only when
the text holds no JSON object at all.
"""

import json
import logging
import math
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.models.recipe import DEFAULT_SERVINGS, MAX_CALORIES, MAX_MINUTES, MAX_SERVINGS, Recipe
from app.services.gemini_utils import safe_json_loads
from app.utils.exceptions import MalformedOutputError

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Generated Recipe"
DEFAULT_DESCRIPTION = "A delicious recipe made with your ingredients"
DEFAULT_INSTRUCTIONS = ["Mix ingredients and cook as desired"]
DEFAULT_PREP_TIME = 15
DEFAULT_COOK_TIME = 20
DEFAULT_DIFFICULTY = "easy"
DIFFICULTIES = ("easy", "medium", "hard")
DEFAULT_NUTRITION: Dict[str, Any] = {
    "calories": 300,
    "protein": "20g",
    "carbs": "25g",
    "fat": "12g",
    "fiber": "3g",
}

_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:[.,]\d+)?)")

# Alternate keys models tend to emit for the same field.
_ALIASES: Dict[str, Tuple[str, ...]] = {
    "title": ("name",),
    "instructions": ("steps", "directions"),
    "prepTime": ("prepTimeMinutes", "prep_time", "prep_time_minutes"),
    "cookTime": ("cookTimeMinutes", "cook_time", "cook_time_minutes"),
    "nutritionalInfo": ("nutrition", "nutritional_info"),
}


def parse_generation_output(raw: Optional[str]) -> Dict[str, Any]:
    """
    Parse raw model text into a JSON object.

    Tolerates markdown fences, surrounding prose, trailing commas and a single
    wrapper key (``{"recipe": {...}}``).

    Raises:
        MalformedOutputError: If no JSON object can be parsed.
    """
    if not raw or not raw.strip():
        raise MalformedOutputError("Generation output is empty")

    try:
        data = safe_json_loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedOutputError(f"Generation output is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedOutputError(
            f"Generation output is JSON but not an object (got {type(data).__name__})"
        )

    return _unwrap(data)


def normalize_recipe_data(data: Any) -> Dict[str, Any]:
    """Apply the repair table to a loosely-typed tree; never raises."""
    tree = data if isinstance(data, dict) else {}
    return {field: repair(_lookup(tree, field)) for field, repair in _FIELD_RULES}


def normalize_generation_output(raw: Optional[str]) -> Recipe:
    """Parse and repair raw model text into a Recipe."""
    tree = parse_generation_output(raw)
    normalized = normalize_recipe_data(tree)
    missing = [field for field, _ in _FIELD_RULES if _lookup(tree, field) is None]
    if missing:
        logger.info("Filled defaults for missing recipe fields: %s", ", ".join(missing))
    return Recipe(**normalized)


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------

def _unwrap(data: Dict[str, Any]) -> Dict[str, Any]:
    if len(data) == 1:
        key, inner = next(iter(data.items()))
        if isinstance(inner, dict) and "recipe" in key.lower():
            logger.info("Unwrapping nested JSON response from key: %s", key)
            return inner
    return data


def _lookup(tree: Dict[str, Any], field: str) -> Any:
    if tree.get(field) is not None:
        return tree[field]
    for alias in _ALIASES.get(field, ()):
        if tree.get(alias) is not None:
            return tree[alias]
    return None


def _non_blank(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _to_number(value: Any) -> Optional[float]:
    """Coerce ints, floats and numeric-looking strings ('15', '15 min', '2,5') to a finite float."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return None
        number = match.group(1).replace(",", ".")
    else:
        return None

    try:
        number = float(number)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _format_number(value: float) -> str:
    return f"{value:g}"


# ---------------------------------------------------------------------------
# Field repairs
# ---------------------------------------------------------------------------

def _repair_title(value: Any) -> str:
    return _non_blank(value) or DEFAULT_TITLE


def _repair_description(value: Any) -> str:
    return value if isinstance(value, str) else DEFAULT_DESCRIPTION


def _repair_instructions(value: Any) -> List[str]:
    if not isinstance(value, list):
        return list(DEFAULT_INSTRUCTIONS)
    steps: List[str] = []
    for item in value:
        if isinstance(item, dict):
            # {"step": 1, "instruction": "..."} / {"text": "..."}
            item = item.get("instruction") or item.get("text")
        text = _non_blank(item)
        if text:
            steps.append(text)
    return steps or list(DEFAULT_INSTRUCTIONS)


def _repair_ingredient(item: Any) -> Optional[Dict[str, Any]]:
    if isinstance(item, str):
        name = _non_blank(item)
        return {"name": name, "amount": None, "unit": None, "optional": False} if name else None
    if not isinstance(item, dict):
        return None

    name = _non_blank(item.get("name")) or _non_blank(item.get("item"))
    if not name:
        return None

    amount = item.get("amount", item.get("quantity"))
    if isinstance(amount, (int, float)) and not isinstance(amount, bool):
        number = _to_number(amount)
        amount = _format_number(number) if number is not None else None
    else:
        amount = _non_blank(amount)

    optional = item.get("optional")
    return {
        "name": name,
        "amount": amount,
        "unit": _non_blank(item.get("unit")),
        "optional": optional if isinstance(optional, bool) else False,
    }


def _repair_ingredients(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    repaired = (_repair_ingredient(item) for item in value)
    return [ing for ing in repaired if ing is not None]


def _minutes(default: int) -> Callable[[Any], int]:
    def repair(value: Any) -> int:
        number = _to_number(value)
        if number is None or not 0 <= number <= MAX_MINUTES:
            return default
        return int(round(number))

    return repair


def _repair_servings(value: Any) -> int:
    number = _to_number(value)
    if number is None or not 1 <= round(number) <= MAX_SERVINGS:
        return DEFAULT_SERVINGS
    return int(round(number))


def _repair_difficulty(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in DIFFICULTIES:
        return value.strip().lower()
    return DEFAULT_DIFFICULTY


def _repair_cuisine(value: Any) -> Optional[str]:
    return _non_blank(value)


def _repair_tags(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    tags: List[str] = []
    for item in value:
        tag = _non_blank(item)
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _repair_magnitude(value: Any, default: str) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = _to_number(value)
        return f"{_format_number(number)}g" if number is not None and number >= 0 else default
    return _non_blank(value) or default


def _repair_nutrition(value: Any) -> Dict[str, Any]:
    info = value if isinstance(value, dict) else {}
    calories = _to_number(info.get("calories"))
    return {
        "calories": (
            calories if calories is not None and 0 <= calories <= MAX_CALORIES else DEFAULT_NUTRITION["calories"]
        ),
        "protein": _repair_magnitude(info.get("protein"), DEFAULT_NUTRITION["protein"]),
        "carbs": _repair_magnitude(
            info.get("carbs", info.get("carbohydrates")), DEFAULT_NUTRITION["carbs"]
        ),
        "fat": _repair_magnitude(info.get("fat"), DEFAULT_NUTRITION["fat"]),
        "fiber": _repair_magnitude(info.get("fiber"), DEFAULT_NUTRITION["fiber"]),
    }


_FIELD_RULES: Tuple[Tuple[str, Callable[[Any], Any]], ...] = (
    ("title", _repair_title),
    ("description", _repair_description),
    ("instructions", _repair_instructions),
    ("ingredients", _repair_ingredients),
    ("prepTime", _minutes(DEFAULT_PREP_TIME)),
    ("cookTime", _minutes(DEFAULT_COOK_TIME)),
    ("servings", _repair_servings),
    ("difficulty", _repair_difficulty),
    ("cuisine", _repair_cuisine),
    ("tags", _repair_tags),
    ("nutritionalInfo", _repair_nutrition),
)
