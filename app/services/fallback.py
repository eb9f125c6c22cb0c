"""Deterministic template recipe used whenever generation fails."""

from app.models.recipe import GenerationRequest, NutritionalInfo, Recipe, RecipeIngredientSpec

FALLBACK_INSTRUCTIONS = (
    "Prepare all ingredients by washing and chopping as needed.",
    "Heat a pan or pot over medium heat.",
    "Add your main ingredients and cook according to their requirements.",
    "Season with salt and pepper to taste.",
    "Serve hot and enjoy!",
)
FALLBACK_TAGS = ("quick", "easy", "homemade")


def build_fallback_recipe(request: GenerationRequest) -> Recipe:
    """Build a simple five-step recipe from the request alone (no I/O, no randomness)."""
    names = list(request.ingredients)
    main = names[0] if names else "Ingredient"

    return Recipe(
        title=f"Simple {main} Recipe",
        description=f"A quick and easy recipe using {', '.join(names[:3])}.",
        instructions=list(FALLBACK_INSTRUCTIONS),
        ingredients=[
            RecipeIngredientSpec(name=name, amount="1", unit="portion", optional=False)
            for name in names
        ],
        prepTime=10,
        cookTime=15,
        servings=request.servings,
        difficulty="easy",
        cuisine="fusion",
        tags=list(FALLBACK_TAGS),
        nutritionalInfo=NutritionalInfo(
            calories=250,
            protein="15g",
            carbs="20g",
            fat="10g",
            fiber="3g",
        ),
    )
