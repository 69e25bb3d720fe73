"""
Builders for catalog items, API events and store errors used across tests.
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from mealprep.models.recipe import Recipe
from mealprep.utils.dynamo import RECIPE_PK, create_recipe_sk

@dataclass
class LambdaContext:
    """Minimal Lambda context accepted by the powertools logger."""
    function_name: str = "mealprep-test"
    function_version: str = "$LATEST"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:us-east-1:123456789012:function:mealprep-test"
    aws_request_id: str = "52fdfc07-2182-154f-163f-5f0f9a621d72"
    log_group_name: str = "/aws/lambda/mealprep-test"
    log_stream_name: str = "2026/01/01/[$LATEST]abcdef"
    tenant_id: Optional[str] = None

def recipe_item(
    recipe_id: str,
    ingredients: List[str],
    cooking_time: int = 20,
    calories: float = 400,
    protein: float = 20,
    fat: float = 10,
    carbohydrate: float = 50,
    is_active: bool = True
) -> Dict[str, Any]:
    """Build a stored catalog recipe item."""
    return {
        "PK": RECIPE_PK,
        "SK": create_recipe_sk(recipe_id),
        "id": recipe_id,
        "name": f"Recipe {recipe_id}",
        "cooking_time": cooking_time,
        "required_ingredients": [
            {"ingredient_id": ingredient_id, "amount": 100, "unit": "g"}
            for ingredient_id in ingredients
        ],
        "nutrition": {
            "calories": calories,
            "protein": protein,
            "fat": fat,
            "carbohydrate": carbohydrate,
            "salt": 1.0
        },
        "is_active": is_active
    }

def make_recipe(recipe_id: str, ingredients: List[str], **kwargs) -> Recipe:
    """Build a Recipe model from the same defaults as recipe_item."""
    return Recipe(**recipe_item(recipe_id, ingredients, **kwargs))

def client_error(code: str, operation: str = "UpdateItem") -> ClientError:
    """Build a botocore ClientError with the given error code."""
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)

def api_event(
    method: str = "GET",
    path: str = "/",
    body: Optional[Any] = None,
    token: Optional[str] = "valid-token",
    query: Optional[Dict[str, str]] = None,
    path_params: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """Build an API Gateway REST proxy event."""
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return {
        "httpMethod": method,
        "path": path,
        "headers": headers,
        "queryStringParameters": query,
        "pathParameters": path_params,
        "body": json.dumps(body) if body is not None else None,
        "isBase64Encoded": False
    }
