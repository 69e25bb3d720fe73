"""
Recipe data models.

Recipes are shared, read-only catalog data. Generation only reads
`required_ingredients` (for candidate search), `cooking_time` (for the
search bound) and `nutrition` (for weekly totals); the remaining fields are
returned to the client for display.
"""
from enum import Enum
from typing import List, Optional
from pydantic import Field

from mealprep.models.base import ApiModel


class SpiceLevel(str, Enum):
    MILD = "mild"
    NORMAL = "normal"
    SPICY = "spicy"
    EXTRA_SPICY = "extra_spicy"


class Difficulty(str, Enum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


class RequiredIngredient(ApiModel):
    """
    An ingredient a recipe calls for.

    Attributes:
        ingredient_id: Catalog ingredient identifier
        ingredient_name: Optional display name
        amount: Quantity in `unit`
        unit: Measurement unit (g, ml, pcs, ...)
        is_essential: False when the ingredient can be left out
    """
    ingredient_id: str
    ingredient_name: Optional[str] = None
    amount: float = 0
    unit: str = ""
    is_essential: bool = True


class RecipeStep(ApiModel):
    order: int
    description: str
    image_url: Optional[str] = None
    time: Optional[int] = None


class Nutrition(ApiModel):
    """Nutrition per serving."""
    calories: float = 0
    protein: float = 0
    fat: float = 0
    carbohydrate: float = 0
    salt: float = 0


class MealPrepInfo(ApiModel):
    """How long a dish keeps and how to reheat it."""
    is_enabled: bool = True
    storage_days: int = Field(0, ge=0)
    storage_method: str = ""
    reheating_instructions: str = ""


class Recipe(ApiModel):
    """
    A cookable dish from the catalog.
    """
    id: str
    name: str
    description: str = ""
    image_url: Optional[str] = None
    cooking_time: int = Field(..., ge=0)
    servings: int = Field(1, ge=1)
    difficulty: Difficulty = Difficulty.NORMAL
    spice_level: SpiceLevel = SpiceLevel.NORMAL
    required_ingredients: List[RequiredIngredient] = Field(..., min_length=1)
    steps: List[RecipeStep] = Field(default_factory=list)
    nutrition: Nutrition = Field(default_factory=Nutrition)
    meal_prep: MealPrepInfo = Field(default_factory=MealPrepInfo)
    tags: List[str] = Field(default_factory=list)
    is_active: bool = True

    def uses_any(self, ingredient_ids) -> bool:
        """Check whether the recipe declares at least one of the given ingredients."""
        wanted = set(ingredient_ids)
        return any(ri.ingredient_id in wanted for ri in self.required_ingredients)
