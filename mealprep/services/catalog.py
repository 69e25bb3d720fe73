"""
Catalog lookup service.

Reads the shared ingredient catalog: categories, ingredients and the
candidate recipe search that feeds weekly menu generation.

Typical usage:
    catalog = CatalogService(get_dynamo())
    categories = catalog.list_active_categories()
    candidates = catalog.search_recipes(["chicken", "rice"], max_cooking_time=60)
"""
from typing import Any, Dict, Iterable, List, Optional

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError
from pydantic import ValidationError as PydanticValidationError

from mealprep.models.ingredient import Ingredient, IngredientCategory
from mealprep.models.recipe import Recipe
from mealprep.services.exceptions import DynamoDBAccessError, ValidationError
from mealprep.utils.dynamo import (
    CATEGORY_PK,
    INGREDIENT_PK,
    RECIPE_PK,
    create_recipe_sk,
)

logger = Logger()

MAX_SEARCH_RESULTS = 50
DEFAULT_PAGE_LIMIT = 50


class CatalogService:
    """Service for reading categories, ingredients and recipes."""

    def __init__(self, dynamo):
        """
        Initialize catalog service.

        Args:
            dynamo: DynamoDB client used for all reads
        """
        self.dynamo = dynamo

    def _query(self, partition_value: str) -> List[Dict[str, Any]]:
        try:
            return self.dynamo.query_items(partition_key="PK", partition_value=partition_value)
        except ClientError as e:
            logger.error("Catalog query failed", extra={
                "partition": partition_value,
                "error_code": e.response.get('Error', {}).get('Code')
            })
            raise DynamoDBAccessError(f"Failed to read {partition_value}") from e

    @staticmethod
    def _parse(model, items: Iterable[Dict[str, Any]]) -> List[Any]:
        parsed = []
        for item in items:
            try:
                parsed.append(model(**item))
            except PydanticValidationError as e:
                logger.warning("Skipping malformed catalog item", extra={
                    "sk": item.get("SK"),
                    "error": str(e)
                })
        return parsed

    def list_active_categories(self) -> List[IngredientCategory]:
        """
        Get active ingredient categories in display order.

        Returns:
            Categories with is_active set, ordered by `order` ascending
        """
        categories = self._parse(IngredientCategory, self._query(CATEGORY_PK))
        active = [c for c in categories if c.is_active]
        return sorted(active, key=lambda c: c.order)

    def list_ingredients(
        self,
        category_id: Optional[str] = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0
    ) -> Dict[str, Any]:
        """
        Get a page of active ingredients.

        The full active set is fetched first and the page is cut from it,
        so `total` always reflects every matching ingredient.

        Args:
            category_id: Optional category to filter by
            limit: Maximum number of items in the page
            offset: Number of matching items to skip

        Returns:
            Dict with items, total, limit and offset

        Raises:
            ValidationError: If limit or offset is negative
        """
        if limit < 0 or offset < 0:
            raise ValidationError("limit and offset must not be negative")

        ingredients = [
            i for i in self._parse(Ingredient, self._query(INGREDIENT_PK))
            if i.is_active and (category_id is None or i.category_id == category_id)
        ]
        return {
            "items": ingredients[offset:offset + limit],
            "total": len(ingredients),
            "limit": limit,
            "offset": offset
        }

    def search_recipes(
        self,
        ingredient_ids: Iterable[str],
        max_cooking_time: Optional[int] = None
    ) -> List[Recipe]:
        """
        Find candidate recipes for a set of selected ingredients.

        A recipe qualifies when it is active, declares at least one of the
        selected ingredients, and (when a bound is given) cooks within
        `max_cooking_time` minutes. Results keep the store order, recipe id
        ascending, and are capped at 50.

        Args:
            ingredient_ids: Selected ingredient identifiers
            max_cooking_time: Optional upper bound on cooking time in minutes

        Returns:
            Candidate recipes

        Raises:
            ValidationError: If no ingredient ids are given
        """
        wanted = set(ingredient_ids)
        if not wanted:
            raise ValidationError("At least one ingredient is required to search recipes")

        candidates = []
        for recipe in self._parse(Recipe, self._query(RECIPE_PK)):
            if not recipe.is_active or not recipe.uses_any(wanted):
                continue
            if max_cooking_time is not None and recipe.cooking_time > max_cooking_time:
                continue
            candidates.append(recipe)
            if len(candidates) >= MAX_SEARCH_RESULTS:
                break

        logger.info("Recipe search completed", extra={
            "ingredient_count": len(wanted),
            "max_cooking_time": max_cooking_time,
            "candidates": len(candidates)
        })
        return candidates

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        """
        Get a single recipe by id.

        Args:
            recipe_id: Recipe identifier

        Returns:
            Recipe if found, None otherwise
        """
        try:
            item = self.dynamo.get_item({"PK": RECIPE_PK, "SK": create_recipe_sk(recipe_id)})
        except ClientError as e:
            raise DynamoDBAccessError(f"Failed to read recipe {recipe_id}") from e
        return Recipe(**item) if item else None
