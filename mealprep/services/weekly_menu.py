"""
Service module for generating weekly meal-prep menus.

Generation is a thin rule-based allocator: candidate recipes come from the
catalog search, the selector picks seven of them, and they are assigned to
monday..sunday in order. The default selector takes the first seven
candidates as returned by the search. Preferences other than the
cooking-time bound are accepted but not applied; a selector that excludes
allergens and disliked ingredients or balances nutrition can be passed to
WeeklyMenuGenerator without touching the rest of the flow.

Typical usage:
    generator = WeeklyMenuGenerator(CatalogService(dynamo), WeeklyMenuStore(dynamo))
    result = generator.generate(user_id, ["chicken", "rice"], profile=user.profile)
"""
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence

from aws_lambda_powertools import Logger

from mealprep.models.recipe import Recipe
from mealprep.models.user import UserProfile
from mealprep.models.weekly_menu import (
    WEEKDAYS,
    DailyRecipes,
    GeneratedMenu,
    GenerationPreferences,
    WeeklyMenu,
    WeeklyNutrition,
)
from mealprep.services.exceptions import (
    GenerationFailedError,
    InsufficientIngredientsError,
    MenuNotFoundError,
)

logger = Logger()

MIN_INGREDIENTS = 2
DAYS_PER_WEEK = len(WEEKDAYS)
DEFAULT_MAX_COOKING_TIME = 60

RecipeSelector = Callable[[Sequence[Recipe]], List[Recipe]]


def select_first_week(candidates: Sequence[Recipe]) -> List[Recipe]:
    """Default selector: the first seven candidates in the order given."""
    return list(candidates[:DAYS_PER_WEEK])


def normalize_ingredients(ingredient_ids: Iterable[str]) -> List[str]:
    """Drop blanks and duplicates, keeping the order of first appearance."""
    seen = []
    for ingredient_id in ingredient_ids:
        if ingredient_id and ingredient_id not in seen:
            seen.append(ingredient_id)
    return seen


def validate_ingredients(ingredient_ids: Iterable[str]) -> List[str]:
    """
    Check a selection has enough distinct ingredients to generate from.

    An empty selection and a single ingredient fail separately so the
    client can tell "select ingredients" from "select one more".

    Args:
        ingredient_ids: Selected ingredient identifiers

    Returns:
        Normalized ingredient ids

    Raises:
        InsufficientIngredientsError: If fewer than 2 distinct ids are given
    """
    normalized = normalize_ingredients(ingredient_ids)
    if not normalized:
        raise InsufficientIngredientsError(
            "Please select ingredients",
            details={"min_required": 1, "provided": 0}
        )
    if len(normalized) < MIN_INGREDIENTS:
        raise InsufficientIngredientsError(
            details={"min_required": MIN_INGREDIENTS, "provided": len(normalized)}
        )
    return normalized


def calculate_weekly_nutrition(recipes: Sequence[Recipe]) -> WeeklyNutrition:
    """
    Sum nutrition over a week of recipes.

    The daily average is total calories divided by seven, not rounded.
    """
    total_calories = sum(r.nutrition.calories for r in recipes)
    return WeeklyNutrition(
        total_calories=total_calories,
        average_calories_per_day=total_calories / DAYS_PER_WEEK,
        total_protein=sum(r.nutrition.protein for r in recipes),
        total_fat=sum(r.nutrition.fat for r in recipes),
        total_carbohydrate=sum(r.nutrition.carbohydrate for r in recipes)
    )


def build_weekly_menu(
    candidates: Sequence[Recipe],
    used_ingredients: Iterable[str],
    user_id: str,
    selector: RecipeSelector = select_first_week,
    generated_at: Optional[datetime] = None
) -> WeeklyMenu:
    """
    Assign one candidate recipe to each day of the week.

    Args:
        candidates: Candidate pool in search order
        used_ingredients: Ingredient ids the menu was generated from
        user_id: Owner of the menu
        selector: Picks seven distinct recipes from the pool
        generated_at: Generation time, now by default

    Returns:
        Unsaved WeeklyMenu (empty id)

    Raises:
        InsufficientIngredientsError: If fewer than 2 ingredients are given
        GenerationFailedError: If the pool has fewer than 7 recipes
    """
    ingredients = validate_ingredients(used_ingredients)

    if len(candidates) < DAYS_PER_WEEK:
        raise GenerationFailedError(
            "Not enough recipes can be made from the selected ingredients",
            details={
                "available_recipes": len(candidates),
                "required": DAYS_PER_WEEK,
                "suggestion": "Try adding more ingredients"
            }
        )

    selected = selector(candidates)
    if len(selected) != DAYS_PER_WEEK or len({r.id for r in selected}) != DAYS_PER_WEEK:
        raise GenerationFailedError(
            "Could not pick a recipe for every day of the week",
            details={"selected": len(selected), "required": DAYS_PER_WEEK}
        )

    daily_recipes = DailyRecipes(**{day: recipe.id for day, recipe in zip(WEEKDAYS, selected)})

    return WeeklyMenu(
        user_id=user_id,
        generated_at=generated_at or datetime.now(timezone.utc),
        used_ingredients=ingredients,
        daily_recipes=daily_recipes,
        weekly_nutrition=calculate_weekly_nutrition(selected)
    )


def resolve_cooking_time(
    preferences: Optional[GenerationPreferences],
    profile: Optional[UserProfile]
) -> int:
    """Candidate search bound: request override, then profile, then 60 minutes."""
    if preferences and preferences.cooking_time_max:
        return preferences.cooking_time_max
    if profile and profile.cooking_time_preference:
        return profile.cooking_time_preference
    return DEFAULT_MAX_COOKING_TIME


class WeeklyMenuGenerator:
    """Generates, saves and resolves weekly menus."""

    def __init__(self, catalog, store, selector: RecipeSelector = select_first_week):
        """
        Initialize generator.

        Args:
            catalog: CatalogService used for candidate search and recipe lookup
            store: WeeklyMenuStore the generated menu is saved to
            selector: Recipe selection policy
        """
        self.catalog = catalog
        self.store = store
        self.selector = selector

    def generate(
        self,
        user_id: str,
        ingredient_ids: Iterable[str],
        preferences: Optional[GenerationPreferences] = None,
        profile: Optional[UserProfile] = None,
        previous_menu_id: Optional[str] = None
    ) -> GeneratedMenu:
        """
        Generate and save a weekly menu from selected ingredients.

        Args:
            user_id: Requesting user
            ingredient_ids: Selected ingredient identifiers
            preferences: Per-request overrides
            profile: Stored dietary profile of the user, if any
            previous_menu_id: Menu being regenerated; its counter is bumped

        Returns:
            Saved menu with recipe bodies in weekday order

        Raises:
            InsufficientIngredientsError: If fewer than 2 ingredients are given
            GenerationFailedError: If fewer than 7 recipes match
            MenuNotFoundError: If previous_menu_id is not one of the user's menus
        """
        ingredients = validate_ingredients(ingredient_ids)

        if previous_menu_id:
            previous = self.store.get(previous_menu_id)
            if previous is None or previous.user_id != user_id:
                raise MenuNotFoundError(details={"menu_id": previous_menu_id})

        max_cooking_time = resolve_cooking_time(preferences, profile)
        candidates = self.catalog.search_recipes(ingredients, max_cooking_time)

        try:
            menu = build_weekly_menu(candidates, ingredients, user_id, selector=self.selector)
        except GenerationFailedError:
            logger.warning("Not enough candidate recipes", extra={
                "user_id": user_id,
                "ingredients": ingredients,
                "max_cooking_time": max_cooking_time,
                "candidates": len(candidates)
            })
            raise

        menu_id = self.store.save(user_id, menu)
        menu = menu.model_copy(update={"id": menu_id})

        if previous_menu_id:
            try:
                self.store.increment_regeneration(previous_menu_id)
            except MenuNotFoundError:
                # new menu is already saved
                logger.warning("Previous menu removed before regeneration count", extra={
                    "user_id": user_id,
                    "menu_id": menu_id,
                    "previous_menu_id": previous_menu_id
                })

        recipes = self.resolve_recipes(menu)

        logger.info("Generated weekly menu", extra={
            "user_id": user_id,
            "menu_id": menu_id,
            "candidates": len(candidates),
            "total_calories": menu.weekly_nutrition.total_calories,
            "regenerated_from": previous_menu_id
        })
        return GeneratedMenu(menu=menu, recipes=recipes)

    def resolve_recipes(self, menu: WeeklyMenu) -> List[Recipe]:
        """Fetch the current recipe bodies of a menu, skipping any since removed."""
        recipes = []
        for recipe_id in menu.daily_recipes.recipe_ids():
            recipe = self.catalog.get_recipe(recipe_id)
            if recipe is None:
                logger.warning("Menu recipe no longer in catalog", extra={
                    "menu_id": menu.id,
                    "recipe_id": recipe_id
                })
                continue
            recipes.append(recipe)
        return recipes
