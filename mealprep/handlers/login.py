"""
Lambda handler for email/password sign-in.
"""
from typing import Dict

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from mealprep.services.profile import ProfileStore
from mealprep.services.registration import LoginRequest, login_user
from mealprep.utils.clients import get_dynamo, get_identity
from mealprep.utils.http import parse_body, parse_model, success_response
from mealprep.utils.logging import logger
from mealprep.utils.middleware import handle_api_errors

tracer = Tracer()

@logger.inject_lambda_context
@tracer.capture_lambda_handler
@handle_api_errors
def handler(event: Dict, context: LambdaContext) -> Dict:
    """Handle POST /api/auth/login."""
    request = parse_model(LoginRequest, parse_body(event))
    result = login_user(request, get_identity(), ProfileStore(get_dynamo()))
    return success_response(result, message="Signed in successfully")
