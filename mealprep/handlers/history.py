"""
Lambda handlers for a user's weekly menu history.

Routes:
    GET    /api/menus                      list_handler
    DELETE /api/menus                      clear_handler
    GET    /api/menus/{menuId}             get_handler
    DELETE /api/menus/{menuId}             delete_handler
    PUT    /api/menus/{menuId}/favorite    favorite_handler
"""
from typing import Dict

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import StrictBool

from mealprep.models.base import ApiModel
from mealprep.models.weekly_menu import WeeklyMenu
from mealprep.services.catalog import CatalogService
from mealprep.services.exceptions import MenuNotFoundError, ValidationError
from mealprep.services.weekly_menu import WeeklyMenuGenerator
from mealprep.services.weekly_menu_store import DEFAULT_PAGE_SIZE, WeeklyMenuStore
from mealprep.utils.clients import get_dynamo
from mealprep.utils.http import (
    int_query_param,
    parse_body,
    parse_model,
    path_param,
    query_param,
    success_response,
)
from mealprep.utils.logging import logger
from mealprep.utils.middleware import handle_api_errors, require_auth

tracer = Tracer()


class FavoriteRequest(ApiModel):
    is_favorite: StrictBool


def _menu_id(event: Dict) -> str:
    menu_id = path_param(event, "menuId")
    if not menu_id:
        raise ValidationError("menuId path parameter is required")
    return menu_id


def _owned_menu(store: WeeklyMenuStore, menu_id: str, user_id: str) -> WeeklyMenu:
    """Load a menu, treating another user's menu as missing."""
    menu = store.get(menu_id)
    if menu is None or menu.user_id != user_id:
        raise MenuNotFoundError(details={"menu_id": menu_id})
    return menu


def _menu_body(menu: WeeklyMenu) -> Dict:
    return menu.model_dump(mode="json", by_alias=True)


@logger.inject_lambda_context
@tracer.capture_lambda_handler
@handle_api_errors
@require_auth
def list_handler(event: Dict, context: LambdaContext, user_id: str) -> Dict:
    """
    Handle GET /api/menus?pageSize&cursor.

    Returns:
        Page of active menus, newest first, and the cursor for the next page
    """
    menus, cursor = WeeklyMenuStore(get_dynamo()).list_for_user(
        user_id,
        page_size=int_query_param(event, "pageSize", DEFAULT_PAGE_SIZE),
        cursor=query_param(event, "cursor")
    )
    return success_response({
        "items": [_menu_body(menu) for menu in menus],
        "nextCursor": cursor
    })


@logger.inject_lambda_context
@tracer.capture_lambda_handler
@handle_api_errors
@require_auth
def clear_handler(event: Dict, context: LambdaContext, user_id: str) -> Dict:
    """Handle DELETE /api/menus: soft-delete the whole history."""
    deleted = WeeklyMenuStore(get_dynamo()).soft_delete_all(user_id)
    return success_response({"deletedCount": deleted}, message="Menu history cleared")


@logger.inject_lambda_context
@tracer.capture_lambda_handler
@handle_api_errors
@require_auth
def get_handler(event: Dict, context: LambdaContext, user_id: str) -> Dict:
    """
    Handle GET /api/menus/{menuId}.

    Opening an active menu records the access time. Deleted menus are
    still returned, flagged with isDeleted, and are not touched.

    Returns:
        The menu with its recipe bodies in weekday order
    """
    dynamo = get_dynamo()
    store = WeeklyMenuStore(dynamo)
    menu = _owned_menu(store, _menu_id(event), user_id)

    if not menu.is_deleted:
        menu = store.touch(menu.id)

    recipes = WeeklyMenuGenerator(CatalogService(dynamo), store).resolve_recipes(menu)
    data = _menu_body(menu)
    data["recipes"] = recipes
    return success_response(data)


@logger.inject_lambda_context
@tracer.capture_lambda_handler
@handle_api_errors
@require_auth
def delete_handler(event: Dict, context: LambdaContext, user_id: str) -> Dict:
    """Handle DELETE /api/menus/{menuId}."""
    store = WeeklyMenuStore(get_dynamo())
    menu = _owned_menu(store, _menu_id(event), user_id)
    if not menu.is_deleted:
        store.soft_delete(menu.id)
    return success_response({"id": menu.id}, message="Menu deleted")


@logger.inject_lambda_context
@tracer.capture_lambda_handler
@handle_api_errors
@require_auth
def favorite_handler(event: Dict, context: LambdaContext, user_id: str) -> Dict:
    """Handle PUT /api/menus/{menuId}/favorite with body {"isFavorite": bool}."""
    request = parse_model(FavoriteRequest, parse_body(event))
    store = WeeklyMenuStore(get_dynamo())
    menu = _owned_menu(store, _menu_id(event), user_id)
    menu = store.set_favorite(menu.id, request.is_favorite)
    return success_response(_menu_body(menu))
