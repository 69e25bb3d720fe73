"""
Lambda handler for account registration.
"""
from typing import Dict

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from mealprep.services.profile import ProfileStore
from mealprep.services.registration import RegistrationRequest, register_user
from mealprep.utils.clients import get_dynamo, get_identity
from mealprep.utils.http import parse_body, parse_model, success_response
from mealprep.utils.logging import logger
from mealprep.utils.middleware import handle_api_errors

tracer = Tracer()

@logger.inject_lambda_context
@tracer.capture_lambda_handler
@handle_api_errors
def handler(event: Dict, context: LambdaContext) -> Dict:
    """
    Handle POST /api/auth/register.

    Args:
        event: API Gateway Lambda proxy event
        context: Lambda context

    Returns:
        API Gateway Lambda proxy response
    """
    request = parse_model(RegistrationRequest, parse_body(event))
    result = register_user(request, get_identity(), ProfileStore(get_dynamo()))
    return success_response(result, message="User registered successfully")
