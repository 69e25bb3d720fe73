"""
Lambda handler for weekly recipe generation.
"""
from typing import Dict

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from mealprep.models.weekly_menu import GenerationRequest
from mealprep.services.catalog import CatalogService
from mealprep.services.profile import ProfileStore
from mealprep.services.weekly_menu import WeeklyMenuGenerator
from mealprep.services.weekly_menu_store import WeeklyMenuStore
from mealprep.utils.clients import get_dynamo
from mealprep.utils.http import parse_body, parse_model, success_response
from mealprep.utils.logging import logger
from mealprep.utils.middleware import handle_api_errors, require_auth

tracer = Tracer()

@logger.inject_lambda_context
@tracer.capture_lambda_handler
@handle_api_errors
@require_auth
def handler(event: Dict, context: LambdaContext, user_id: str) -> Dict:
    """
    Handle POST /api/recipes/generate.

    The stored dietary profile supplies the cooking-time bound when the
    request does not override it. A user without a stored profile can
    still generate a menu with the default bound.

    Args:
        event: API Gateway Lambda proxy event
        context: Lambda context
        user_id: Account id resolved from the bearer token

    Returns:
        API Gateway Lambda proxy response
    """
    request = parse_model(GenerationRequest, parse_body(event))

    dynamo = get_dynamo()
    user = ProfileStore(dynamo).get(user_id)
    generator = WeeklyMenuGenerator(CatalogService(dynamo), WeeklyMenuStore(dynamo))

    result = generator.generate(
        user_id,
        request.ingredients,
        preferences=request.preferences,
        profile=user.profile if user else None,
        previous_menu_id=request.previous_menu_id if request.regenerate else None
    )
    return success_response(result.to_response(), message="Weekly recipes generated successfully")
