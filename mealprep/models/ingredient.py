"""
Ingredient catalog models.
"""
from typing import List, Optional
from pydantic import Field

from mealprep.models.base import ApiModel


class IngredientCategory(ApiModel):
    """
    A top-level grouping of ingredients shown on the selection screen.
    """
    id: str
    name: str
    name_en: Optional[str] = None
    icon: str = ""
    color: Optional[str] = None
    order: int = Field(..., ge=0)
    is_active: bool = True


class NutritionPer100g(ApiModel):
    calories: float = 0
    protein: float = 0
    fat: float = 0
    carbohydrate: float = 0


class Ingredient(ApiModel):
    """
    A concrete ingredient belonging to exactly one category.
    """
    id: str
    name: str
    name_en: Optional[str] = None
    category_id: str
    season: Optional[List[str]] = None
    storage_method: str = ""
    storage_days: int = Field(0, ge=0)
    allergy_info: Optional[List[str]] = None
    nutrition_per_100g: NutritionPer100g = Field(default_factory=NutritionPer100g)
    is_active: bool = True
