"""
DynamoDB utility functions for data access.
"""
import os
import json
import base64
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Any, Tuple
import boto3
from boto3.dynamodb.conditions import Key

# Singleton instance
_dynamo_instance = None

def get_dynamo() -> 'DynamoDBClient':
    """
    Get or create singleton DynamoDB client instance.

    Services never build their own client: handlers fetch this instance and
    pass it to the service constructors, which keeps tests free to hand in a
    mock instead.

    Returns:
        DynamoDBClient: Singleton instance of DynamoDB client

    Raises:
        EnvironmentError: If MEALPREP_TABLE_NAME environment variable is not set
    """
    global _dynamo_instance
    if _dynamo_instance is None:
        try:
            table_name = os.environ['MEALPREP_TABLE_NAME']
        except KeyError:
            raise EnvironmentError(
                "MEALPREP_TABLE_NAME environment variable not set. "
                "This variable must be set to the DynamoDB table name."
            )
        _dynamo_instance = DynamoDBClient(table_name)
    return _dynamo_instance

class DynamoDBClient:
    """Client for interacting with DynamoDB table."""

    def __init__(self, table_name: str):
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)

    def put_item(
        self,
        item: Dict[str, Any],
        condition_expression: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Put a single item into the table.

        Args:
            item: Dictionary containing item attributes
            condition_expression: Optional condition the write must satisfy

        Returns:
            Response from DynamoDB
        """
        kwargs = {"Item": to_dynamo(item)}
        if condition_expression:
            kwargs["ConditionExpression"] = condition_expression
        return self.table.put_item(**kwargs)

    def get_item(self, key: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """
        Get a single item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Item if found, None otherwise
        """
        response = self.table.get_item(Key=key)
        item = response.get('Item')
        return from_dynamo(item) if item is not None else None

    def query_items(
        self,
        partition_key: str,
        partition_value: str,
        sort_key_condition: Optional[Key] = None
    ) -> List[Dict[str, Any]]:
        """
        Query all items of a partition, following pagination to the end.

        Args:
            partition_key: Name of partition key
            partition_value: Value of partition key
            sort_key_condition: Optional sort key condition

        Returns:
            List of matching items in sort key order
        """
        key_condition = Key(partition_key).eq(partition_value)
        if sort_key_condition:
            key_condition = key_condition & sort_key_condition

        kwargs = {"KeyConditionExpression": key_condition}
        items = []
        while True:
            response = self.table.query(**kwargs)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        return [from_dynamo(item) for item in items]

    def query_page(
        self,
        index_name: str,
        partition_key: str,
        partition_value: str,
        limit: int,
        start_key: Optional[Dict[str, Any]] = None,
        scan_forward: bool = True
    ) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """
        Query a single page from a secondary index.

        Args:
            index_name: Name of the global secondary index
            partition_key: Name of the index partition key
            partition_value: Value of the index partition key
            limit: Maximum number of items to return
            start_key: LastEvaluatedKey of the previous page
            scan_forward: False to read the sort key in descending order

        Returns:
            Tuple of (items, last evaluated key or None on the final page)
        """
        kwargs = {
            "IndexName": index_name,
            "KeyConditionExpression": Key(partition_key).eq(partition_value),
            "ScanIndexForward": scan_forward,
            "Limit": limit
        }
        if start_key:
            kwargs["ExclusiveStartKey"] = start_key

        response = self.table.query(**kwargs)
        items = [from_dynamo(item) for item in response.get('Items', [])]
        return items, response.get('LastEvaluatedKey')

    def update_item(
        self,
        key: Dict[str, str],
        update_expression: str,
        expression_values: Optional[Dict[str, Any]] = None,
        expression_names: Optional[Dict[str, str]] = None,
        condition_expression: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Update an item in the table.

        Args:
            key: Dictionary containing partition key and sort key
            update_expression: Update expression
            expression_values: Expression attribute values
            expression_names: Expression attribute names
            condition_expression: Optional condition the update must satisfy

        Returns:
            Updated item attributes
        """
        kwargs = {
            "Key": key,
            "UpdateExpression": update_expression,
            "ReturnValues": "ALL_NEW"
        }
        if expression_values:
            kwargs["ExpressionAttributeValues"] = to_dynamo(expression_values)
        if expression_names:
            kwargs["ExpressionAttributeNames"] = expression_names
        if condition_expression:
            kwargs["ConditionExpression"] = condition_expression

        response = self.table.update_item(**kwargs)
        return from_dynamo(response.get('Attributes', {}))

def to_dynamo(value: Any) -> Any:
    """Convert floats to Decimal, which is the only number type boto3 accepts."""
    return json.loads(json.dumps(value), parse_float=Decimal)

def from_dynamo(value: Any) -> Any:
    """Convert Decimal values read from DynamoDB back to int or float."""
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value

def encode_cursor(last_key: Optional[Dict[str, Any]]) -> Optional[str]:
    """Encode a LastEvaluatedKey as an opaque url-safe token."""
    if not last_key:
        return None
    raw = json.dumps(from_dynamo(last_key), sort_keys=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")

def decode_cursor(cursor: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Decode a token produced by encode_cursor.

    Raises:
        ValueError: If the token is not a valid cursor
    """
    if not cursor:
        return None
    try:
        decoded = json.loads(base64.urlsafe_b64decode(cursor.encode("ascii")))
    except (ValueError, UnicodeError) as e:
        raise ValueError("Malformed pagination cursor") from e
    if not isinstance(decoded, dict):
        raise ValueError("Malformed pagination cursor")
    return decoded

def format_sort_timestamp(value: datetime) -> str:
    """
    Format a timestamp as a fixed-width UTC string.

    Always carries six fractional digits so string order matches time order
    when used as a sort key.
    """
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")

def create_pk(user_id: str) -> str:
    """Create partition key from user ID."""
    return f"USER#{user_id}"

PROFILE_SK = "PROFILE"
METADATA_SK = "METADATA"

CATEGORY_PK = "CATALOG#CATEGORY"
INGREDIENT_PK = "CATALOG#INGREDIENT"
RECIPE_PK = "CATALOG#RECIPE"

def create_menu_pk(menu_id: str) -> str:
    """Create partition key for a weekly menu."""
    return f"MENU#{menu_id}"

def create_category_sk(category_id: str) -> str:
    """Create sort key for an ingredient category."""
    return f"CATEGORY#{category_id}"

def create_ingredient_sk(ingredient_id: str) -> str:
    """Create sort key for an ingredient."""
    return f"INGREDIENT#{ingredient_id}"

def create_recipe_sk(recipe_id: str) -> str:
    """
    Create sort key for a catalog recipe.

    Recipes share one partition, so the sort key order (recipe id ascending)
    is the stable order in which candidate searches return them.

    Args:
        recipe_id: Recipe identifier

    Returns:
        Sort key in format "RECIPE#{recipe_id}"
    """
    return f"RECIPE#{recipe_id}"
