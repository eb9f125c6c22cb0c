"""Recipe generation and stored-recipe endpoints."""

import logging
import math

from fastapi import APIRouter, Depends, Query, Request, status

from app.api.dependencies import get_recipe_pipeline, get_recipe_repository
from app.middleware.auth import get_current_user_id
from app.middleware.rate_limit import GENERATION_LIMIT, limiter
from app.models.recipe import (
    FavoriteData,
    FavoriteResponse,
    GenerateRecipeRequest,
    MessageResponse,
    Pagination,
    RecipeData,
    RecipeListData,
    RecipeListResponse,
    RecipeResponse,
)
from app.services.recipe_pipeline import RecipePipeline
from app.services.recipe_repository import RecipeRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.post("/generate", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(GENERATION_LIMIT)
async def generate_recipe(
    request: Request,
    body: GenerateRecipeRequest,
    user_id: int = Depends(get_current_user_id),
    pipeline: RecipePipeline = Depends(get_recipe_pipeline),
) -> RecipeResponse:
    """
    Generate a recipe from ingredients the user owns and store it.

    Generation problems never fail the request; the user gets a simpler
    fallback recipe instead. Only an empty ingredient selection (400) or a
    storage failure (500) is reported as an error.
    """
    logger.info(
        "Route /recipes/generate called",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "route": "/recipes/generate",
            "params": {
                "ingredient_count": len(body.ingredientIds),
                "has_preferences": body.preferences is not None,
            },
        },
    )

    stored = await pipeline.create_recipe(user_id, body.ingredientIds, body.preferences)
    return RecipeResponse(message="Recipe generated successfully", data=RecipeData(recipe=stored))


@router.get("", response_model=RecipeListResponse)
async def list_recipes(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    repository: RecipeRepository = Depends(get_recipe_repository),
) -> RecipeListResponse:
    """List the user's recipes, newest first."""
    recipes, total = repository.list_for_owner(user_id, page=page, limit=limit)
    return RecipeListResponse(
        data=RecipeListData(
            recipes=recipes,
            pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
        )
    )


@router.get("/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(
    recipe_id: int,
    user_id: int = Depends(get_current_user_id),
    repository: RecipeRepository = Depends(get_recipe_repository),
) -> RecipeResponse:
    """Get one of the user's recipes."""
    return RecipeResponse(data=RecipeData(recipe=repository.get_for_owner(recipe_id, user_id)))


@router.post("/{recipe_id}/favorite", response_model=FavoriteResponse)
async def toggle_favorite(
    recipe_id: int,
    user_id: int = Depends(get_current_user_id),
    repository: RecipeRepository = Depends(get_recipe_repository),
) -> FavoriteResponse:
    """Add one of the user's recipes to their favorites, or remove it."""
    is_favorite = repository.toggle_favorite(recipe_id, user_id)
    message = "Recipe added to favorites" if is_favorite else "Recipe removed from favorites"
    return FavoriteResponse(message=message, data=FavoriteData(isFavorite=is_favorite))


@router.delete("/{recipe_id}", response_model=MessageResponse)
async def delete_recipe(
    recipe_id: int,
    user_id: int = Depends(get_current_user_id),
    repository: RecipeRepository = Depends(get_recipe_repository),
) -> MessageResponse:
    """Delete one of the user's recipes together with its ingredient rows."""
    repository.delete_for_owner(recipe_id, user_id)
    return MessageResponse(message="Recipe deleted successfully")
