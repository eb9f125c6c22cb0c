"""Recipe Pydantic models."""

from datetime import datetime
from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

Difficulty = Literal["easy", "medium", "hard"]

DEFAULT_SERVINGS = 4

# Upper bounds for generated values; anything larger is treated as missing.
MAX_MINUTES = 10080  # one week
MAX_SERVINGS = 100
MAX_CALORIES = 100000


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        return None
    return value


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


NonBlankStr = Annotated[str, AfterValidator(_require_text)]
OptionalText = Annotated[Optional[str], AfterValidator(_blank_to_none)]


class RecipePreferences(BaseModel):
    """Optional constraints the user attaches to a generation request."""

    dietaryRestrictions: Optional[List[str]] = Field(None, description="Dietary restriction labels")
    cuisine: Optional[str] = Field(None, description="Cuisine style (e.g. 'italian')")
    servings: Optional[int] = Field(None, le=MAX_SERVINGS, description="Number of servings, defaults to 4")
    maxPrepTime: Optional[int] = Field(None, gt=0, description="Maximum prep time in minutes")


class GenerationRequest(BaseModel):
    """Validated input for one recipe generation."""

    model_config = ConfigDict(frozen=True)

    ingredients: List[str] = Field(..., min_length=1, description="Deduplicated ingredient names")
    dietaryRestrictions: Optional[List[str]] = None
    cuisine: Optional[str] = None
    servings: int = Field(DEFAULT_SERVINGS, gt=0, le=MAX_SERVINGS)
    maxPrepTime: Optional[int] = Field(None, gt=0)


class RecipeIngredientSpec(BaseModel):
    """One ingredient line of a generated recipe."""

    name: NonBlankStr = Field(..., description="Ingredient name")
    amount: OptionalText = Field(None, description="Amount as text (e.g. '1', '1/2', '2.5')")
    unit: OptionalText = Field(None, description="Unit of measurement (e.g. 'cup', 'piece')")
    optional: bool = False


class NutritionalInfo(BaseModel):
    """Per-serving nutrition estimate."""

    calories: float = Field(..., ge=0, le=MAX_CALORIES, allow_inf_nan=False)
    protein: NonBlankStr
    carbs: NonBlankStr
    fat: NonBlankStr
    fiber: NonBlankStr = "3g"


class Recipe(BaseModel):
    """Canonical recipe produced by normalization or by the fallback.

    Blank strings follow the same rules as the normalizer, so every valid
    Recipe survives a serialize/normalize round trip unchanged.
    """

    model_config = ConfigDict(frozen=True)

    title: NonBlankStr = Field(..., min_length=1)
    description: str = ""
    instructions: List[str] = Field(..., min_length=1)
    ingredients: List[RecipeIngredientSpec] = Field(default_factory=list)
    prepTime: int = Field(..., ge=0, le=MAX_MINUTES, description="Preparation time in minutes")
    cookTime: int = Field(..., ge=0, le=MAX_MINUTES, description="Cooking time in minutes")
    servings: int = Field(..., gt=0, le=MAX_SERVINGS)
    difficulty: Difficulty = "easy"
    cuisine: OptionalText = None
    tags: List[str] = Field(default_factory=list)
    nutritionalInfo: NutritionalInfo

    @field_validator("instructions")
    @classmethod
    def _steps_not_blank(cls, steps: List[str]) -> List[str]:
        if any(not step.strip() for step in steps):
            raise ValueError("instruction steps must be non-empty")
        return steps

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: List[str]) -> List[str]:
        return list(dict.fromkeys(tag for tag in tags if tag.strip()))


class IngredientSummary(BaseModel):
    """Catalog fields joined onto each stored recipe ingredient."""

    id: int
    name: str
    category: str


class Ingredient(IngredientSummary):
    """Catalog ingredient."""

    commonUnits: List[str] = Field(default_factory=list)


class StoredRecipeIngredient(BaseModel):
    """Association row between a stored recipe and a catalog ingredient."""

    id: int
    recipeId: int
    ingredientId: int
    quantity: Optional[float] = None
    unit: Optional[str] = None
    optional: bool = False
    substitutions: List[str] = Field(default_factory=list)
    ingredient: IngredientSummary


class StoredRecipe(BaseModel):
    """A persisted recipe with its hydrated ingredient associations."""

    id: int
    title: str
    description: str
    instructions: str = Field(..., description="Steps joined with a blank line between them")
    prepTime: int
    cookTime: int
    servings: int
    difficulty: Difficulty
    cuisine: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    nutritionalInfo: NutritionalInfo
    isAiGenerated: bool
    aiPrompt: Optional[str] = None
    createdBy: int
    createdAt: datetime
    recipeIngredients: List[StoredRecipeIngredient] = Field(default_factory=list)
    isFavorite: bool = Field(False, description="Whether the requesting user favorited this recipe")
    favoriteCount: int = 0


class GenerateRecipeRequest(BaseModel):
    """Body of POST /recipes/generate."""

    ingredientIds: List[int] = Field(..., description="Catalog ids of the ingredients the user owns")
    preferences: Optional[RecipePreferences] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ingredientIds": [1, 14],
                "preferences": {
                    "dietaryRestrictions": ["Gluten-Free"],
                    "cuisine": "italian",
                    "servings": 2,
                    "maxPrepTime": 30,
                },
            }
        }
    )


class RecipeData(BaseModel):
    recipe: StoredRecipe


class RecipeResponse(BaseModel):
    """Envelope for a single recipe."""

    success: bool = True
    message: Optional[str] = None
    data: RecipeData


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class RecipeListData(BaseModel):
    recipes: List[StoredRecipe]
    pagination: Pagination


class RecipeListResponse(BaseModel):
    """Envelope for a page of recipes."""

    success: bool = True
    data: RecipeListData


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class FavoriteData(BaseModel):
    isFavorite: bool


class FavoriteResponse(BaseModel):
    """Envelope for a favorite toggle."""

    success: bool = True
    message: str
    data: FavoriteData
