"""
Lambda handler for reading and updating the signed-in user's profile.
"""
from typing import Dict

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from mealprep.services.exceptions import UserNotFoundError, ValidationError
from mealprep.services.profile import ProfileStore
from mealprep.utils.clients import get_dynamo
from mealprep.utils.http import http_method, parse_body, success_response
from mealprep.utils.logging import logger
from mealprep.utils.middleware import handle_api_errors, require_auth

tracer = Tracer()

@logger.inject_lambda_context
@tracer.capture_lambda_handler
@handle_api_errors
@require_auth
def handler(event: Dict, context: LambdaContext, user_id: str) -> Dict:
    """
    Handle GET and PUT /api/user/profile.

    PUT accepts a partial user: only the fields sent are changed.

    Args:
        event: API Gateway Lambda proxy event
        context: Lambda context
        user_id: Account id resolved from the bearer token

    Returns:
        API Gateway Lambda proxy response
    """
    profiles = ProfileStore(get_dynamo())
    method = http_method(event)

    if method == "GET":
        user = profiles.get(user_id)
        if user is None:
            raise UserNotFoundError()
        return success_response(user)

    if method == "PUT":
        user = profiles.update(user_id, parse_body(event))
        return success_response(user, message="Profile updated successfully")

    raise ValidationError(f"Unsupported method {method}")
