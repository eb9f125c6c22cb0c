"""Shared helpers for Gemini responses and tolerant JSON parsing."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", flags=re.IGNORECASE | re.MULTILINE)
_FENCE_CLOSE = re.compile(r"\s*```\s*$", flags=re.MULTILINE)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def extract_first_json_value(text: str) -> str:
    """
    Best-effort extraction of a single JSON object/array from a model response.

    Handles:
    - markdown fences
    - leading/trailing prose ("Here is your recipe: {...} Enjoy!")
    """
    t = (text or "").strip()
    if not t:
        return t

    t = _FENCE_OPEN.sub("", t)
    t = _FENCE_CLOSE.sub("", t).strip()

    if (t.startswith("{") and t.endswith("}")) or (t.startswith("[") and t.endswith("]")):
        return t

    starts = [i for i in (t.find("{"), t.find("[")) if i != -1]
    if not starts:
        return t
    start = min(starts)
    end = max(t.rfind("}"), t.rfind("]"))

    if end > start:
        return t[start : end + 1].strip()

    return t


def safe_json_loads(text: str) -> Any:
    """
    Parse JSON with tolerant extraction and a tiny local repair (trailing commas).
    Raises json.JSONDecodeError if still invalid.
    """
    json_text = extract_first_json_value(text)

    try:
        return json.loads(json_text)
    except json.JSONDecodeError:
        # {"a": 1,} -> {"a": 1}
        return json.loads(_TRAILING_COMMA.sub(r"\1", json_text))


def get_response_text(response: Any) -> str:
    """
    Extract text from a google-genai response.

    Tries ``response.text`` first, then the first candidate's text parts
    (``response.text`` raises or is empty for some finish reasons).
    """
    try:
        t = getattr(response, "text", None)
        if isinstance(t, str) and t.strip():
            return t
    except (AttributeError, ValueError):
        pass

    candidates = getattr(response, "candidates", None) or []
    if candidates:
        content = getattr(candidates[0], "content", None)
        for part in getattr(content, "parts", None) or []:
            pt = getattr(part, "text", None)
            if isinstance(pt, str) and pt.strip():
                return pt

    return ""


def response_debug_summary(response: Any) -> Dict[str, Any]:
    """Compact debug info explaining "HTTP 200 but empty text"."""
    out: Dict[str, Any] = {}
    candidates = getattr(response, "candidates", None) or []
    out["candidates"] = len(candidates)
    if candidates:
        c0 = candidates[0]
        out["finish_reason"] = getattr(c0, "finish_reason", None)
        out["safety_ratings"] = getattr(c0, "safety_ratings", None)
        content = getattr(c0, "content", None)
        out["parts"] = len(getattr(content, "parts", None) or [])
    out["prompt_feedback"] = getattr(response, "prompt_feedback", None)
    return out


def log_empty_response(prefix: str, response: Any) -> None:
    summary = response_debug_summary(response)
    logger.warning("%s empty response text. summary=%s", prefix, summary)
