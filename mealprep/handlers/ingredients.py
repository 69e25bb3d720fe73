"""
Lambda handlers for the ingredient catalog.
"""
from typing import Dict

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from mealprep.services.catalog import DEFAULT_PAGE_LIMIT, CatalogService
from mealprep.utils.clients import get_dynamo
from mealprep.utils.http import int_query_param, query_param, success_response
from mealprep.utils.logging import logger
from mealprep.utils.middleware import handle_api_errors, require_auth

tracer = Tracer()

@logger.inject_lambda_context
@tracer.capture_lambda_handler
@handle_api_errors
@require_auth
def categories_handler(event: Dict, context: LambdaContext, user_id: str) -> Dict:
    """
    Handle GET /api/ingredients/categories.

    Returns:
        Active categories in display order
    """
    categories = CatalogService(get_dynamo()).list_active_categories()
    return success_response(categories)

@logger.inject_lambda_context
@tracer.capture_lambda_handler
@handle_api_errors
@require_auth
def handler(event: Dict, context: LambdaContext, user_id: str) -> Dict:
    """
    Handle GET /api/ingredients?categoryId&limit&offset.

    Returns:
        Page of active ingredients with the unpaginated total
    """
    page = CatalogService(get_dynamo()).list_ingredients(
        category_id=query_param(event, "categoryId"),
        limit=int_query_param(event, "limit", DEFAULT_PAGE_LIMIT),
        offset=int_query_param(event, "offset", 0)
    )
    return success_response(page)
