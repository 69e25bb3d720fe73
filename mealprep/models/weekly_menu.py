"""
Model definitions for generated weekly menus.
"""
from datetime import datetime
from typing import List, Literal, Optional, Union
from pydantic import Field, computed_field

from mealprep.models.base import ApiModel
from mealprep.models.recipe import Recipe

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class DailyRecipes(ApiModel):
    """Recipe id assigned to each day of the week."""
    monday: str
    tuesday: str
    wednesday: str
    thursday: str
    friday: str
    saturday: str
    sunday: str

    def recipe_ids(self) -> List[str]:
        """Recipe ids in weekday order."""
        return [getattr(self, day) for day in WEEKDAYS]


class WeeklyNutrition(ApiModel):
    total_calories: float
    average_calories_per_day: float
    total_protein: float
    total_fat: float
    total_carbohydrate: float


class UserActions(ApiModel):
    is_favorite: bool = False
    regeneration_count: int = Field(0, ge=0)
    last_accessed_at: Optional[datetime] = None
    notes: Optional[str] = None


class ActiveState(ApiModel):
    status: Literal["active"] = "active"


class DeletedState(ApiModel):
    status: Literal["deleted"] = "deleted"
    deleted_at: datetime


MenuLifecycle = Union[ActiveState, DeletedState]


class WeeklyMenu(ApiModel):
    """
    One generated week of recipes for a user.

    `id` is empty until the menu store assigns one on save. The lifecycle
    moves from active to deleted once and never back.
    """
    id: str = ""
    user_id: str
    generated_at: datetime
    used_ingredients: List[str]
    daily_recipes: DailyRecipes
    weekly_nutrition: WeeklyNutrition
    user_actions: UserActions = Field(default_factory=UserActions)
    lifecycle: MenuLifecycle = Field(default_factory=ActiveState, discriminator="status")

    @computed_field
    @property
    def is_deleted(self) -> bool:
        return isinstance(self.lifecycle, DeletedState)


class GenerationPreferences(ApiModel):
    """
    Per-request overrides sent with a generation request.

    Only `cooking_time_max` affects the result (as the candidate search
    bound); the others are accepted and stored for future selectors.
    """
    cooking_time_max: Optional[int] = Field(None, ge=1)
    spice_level: Optional[str] = None
    calorie_target_per_meal: Optional[int] = Field(None, ge=0)
    avoid_ingredients: List[str] = Field(default_factory=list)


class GenerationRequest(ApiModel):
    ingredients: List[str] = Field(default_factory=list)
    preferences: Optional[GenerationPreferences] = None
    regenerate: bool = False
    previous_menu_id: Optional[str] = None


class GeneratedMenu(ApiModel):
    """A saved menu together with the recipe bodies for display."""
    menu: WeeklyMenu
    recipes: List[Recipe]

    def to_response(self) -> dict:
        """Flatten into the generation response shape."""
        data = self.menu.model_dump(
            mode="json",
            by_alias=True,
            include={"id", "user_id", "generated_at", "used_ingredients",
                     "daily_recipes", "weekly_nutrition"}
        )
        data["recipes"] = [r.model_dump(mode="json", by_alias=True) for r in self.recipes]
        return data
