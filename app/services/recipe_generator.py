"""Recipe generation with a guaranteed fallback.

Generation is a two-stage pipeline:

1. ``try_generate`` calls the generation client and normalizes its output,
   returning a ``GenerationOutcome`` that holds either a Recipe or the kind of
   failure that happened. It never raises.
2. ``GenerationOutcome.or_else`` substitutes the deterministic fallback
   recipe when the first stage failed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from app.models.recipe import GenerationRequest, Recipe
from app.services.fallback import build_fallback_recipe
from app.services.gemini_service import GenerationClient
from app.utils.exceptions import GenerationError
from app.utils.recipe_normalization import normalize_generation_output

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationFailure:
    """Why a generation attempt produced no recipe."""

    kind: str
    message: str


@dataclass(frozen=True)
class GenerationOutcome:
    """Result of one generation attempt: a recipe or a failure, never both."""

    recipe: Optional[Recipe] = None
    failure: Optional[GenerationFailure] = None

    @property
    def succeeded(self) -> bool:
        return self.recipe is not None

    def or_else(self, fallback: Callable[[], Recipe]) -> Recipe:
        if self.recipe is not None:
            return self.recipe
        return fallback()


class RecipeGenerator:
    """Turns a generation request into a Recipe, falling back when the model fails."""

    def __init__(self, client: GenerationClient):
        self.client = client

    async def try_generate(self, request: GenerationRequest) -> GenerationOutcome:
        try:
            raw = await self.client.invoke(request)
            recipe = normalize_generation_output(raw)
        except GenerationError as e:
            logger.warning(
                "Recipe generation failed (%s): %s", e.kind, e, extra={"failure_kind": e.kind}
            )
            return GenerationOutcome(failure=GenerationFailure(kind=e.kind, message=str(e)))
        except Exception as e:
            # Any other adapter/normalizer fault still ends on the fallback path.
            logger.error("Unexpected error generating recipe: %s", e, exc_info=True)
            return GenerationOutcome(failure=GenerationFailure(kind="unexpected", message=str(e)))

        logger.info("Generated recipe %r", recipe.title)
        return GenerationOutcome(recipe=recipe)

    async def generate(self, request: GenerationRequest) -> Recipe:
        outcome = await self.try_generate(request)
        if not outcome.succeeded:
            logger.info("Using fallback recipe for %d ingredients", len(request.ingredients))
        return outcome.or_else(lambda: build_fallback_recipe(request))
