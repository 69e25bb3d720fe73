"""
Pytest configuration and shared fixtures.
"""
import pytest
from typing import Any, Dict, List
from unittest.mock import Mock

from factories import LambdaContext, recipe_item

@pytest.fixture
def lambda_context() -> LambdaContext:
    return LambdaContext()

@pytest.fixture
def mock_dynamo() -> Mock:
    """Mock DynamoDB client with empty reads."""
    dynamo = Mock()
    dynamo.query_items.return_value = []
    dynamo.get_item.return_value = None
    return dynamo

@pytest.fixture
def eight_recipe_items() -> List[Dict[str, Any]]:
    """
    Catalog of eight active recipes using chicken or rice.

    Recipe rNN cooks in 10+NN minutes and has NN*100 kcal, so weekly
    totals are easy to check.
    """
    return [
        recipe_item(
            f"r{i:02d}",
            ["chicken"] if i % 2 else ["rice", "onion"],
            cooking_time=10 + i,
            calories=100 * i,
            protein=10 * i,
            fat=i,
            carbohydrate=5 * i
        )
        for i in range(1, 9)
    ]
