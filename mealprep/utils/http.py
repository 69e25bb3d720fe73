"""
API Gateway request and response helpers.
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from mealprep.services.exceptions import MealPrepError, ValidationError

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*"
}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_json(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_json(v) for k, v in value.items()}
    return value


def success_response(data: Any, message: Optional[str] = None, status_code: int = 200) -> Dict[str, Any]:
    """
    Build a success envelope.

    Args:
        data: Payload; pydantic models are serialized with camelCase aliases
        message: Optional human-readable message
        status_code: HTTP status

    Returns:
        API Gateway Lambda proxy response
    """
    body = {"data": _to_json(data), "timestamp": _timestamp()}
    if message:
        body["message"] = message
    return {
        "statusCode": status_code,
        "headers": JSON_HEADERS,
        "body": json.dumps(body, default=str),
        "isBase64Encoded": False
    }


def error_response(error: MealPrepError) -> Dict[str, Any]:
    """Build an error envelope from a service exception."""
    body = {
        "error": error.message,
        "code": error.code,
        "timestamp": _timestamp()
    }
    if error.details:
        body["details"] = error.details
    return {
        "statusCode": error.status_code,
        "headers": JSON_HEADERS,
        "body": json.dumps(body, default=str),
        "isBase64Encoded": False
    }


def parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Parse the JSON body of a proxy event.

    Raises:
        ValidationError: If the body is not a JSON object
    """
    body = event.get("body")
    if body is None or body == "":
        return {}
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except json.JSONDecodeError as e:
            raise ValidationError("Request body must be valid JSON") from e
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def query_param(event: Dict[str, Any], name: str) -> Optional[str]:
    """Get a query string parameter, None when absent or empty."""
    params = event.get("queryStringParameters") or {}
    value = params.get(name)
    return value if value not in (None, "") else None


def int_query_param(event: Dict[str, Any], name: str, default: int) -> int:
    """
    Get an integer query string parameter.

    Raises:
        ValidationError: If the value is not an integer
    """
    value = query_param(event, name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValidationError(f"{name} must be an integer", details={"field": name}) from e


def path_param(event: Dict[str, Any], name: str) -> Optional[str]:
    params = event.get("pathParameters") or {}
    return params.get(name)


def get_header(event: Dict[str, Any], name: str) -> Optional[str]:
    """Get a request header, ignoring case."""
    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def http_method(event: Dict[str, Any]) -> str:
    """Request method for REST (v1) and HTTP (v2) API payloads."""
    method = event.get("httpMethod")
    if not method:
        method = event.get("requestContext", {}).get("http", {}).get("method", "")
    return method.upper()


def parse_model(model, payload: Dict[str, Any]):
    """
    Validate a payload into a pydantic model.

    Raises:
        ValidationError: With one message per invalid field
    """
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e
