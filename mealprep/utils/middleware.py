"""
Middleware functions for request processing.
"""
from functools import wraps
from typing import Any, Callable, Dict

from mealprep.services.exceptions import (
    InternalError,
    InvalidTokenError,
    MealPrepError,
    UnauthorizedError,
)
from mealprep.utils.clients import get_identity
from mealprep.utils.http import error_response, get_header
from mealprep.utils.logging import logger

BEARER_PREFIX = "Bearer "


def handle_api_errors(f: Callable) -> Callable:
    """
    Decorator turning exceptions into error envelopes.

    Service exceptions keep their status and code. Anything else is logged
    with its traceback and returned as a generic 500 so internals do not
    leak to the client.
    """
    @wraps(f)
    def wrapped(event: Dict[str, Any], *args: Any, **kwargs: Any) -> Dict[str, Any]:
        try:
            return f(event, *args, **kwargs)
        except MealPrepError as e:
            log = logger.error if e.status_code >= 500 else logger.info
            log("Request failed", extra={
                "code": e.code,
                "status_code": e.status_code,
                "error_type": e.__class__.__name__,
                "error_message": e.message
            })
            if isinstance(e, InternalError):
                return error_response(InternalError())
            return error_response(e)
        except Exception as e:
            logger.exception("Unhandled error", extra={
                "error_type": e.__class__.__name__
            })
            return error_response(InternalError())

    return wrapped


def require_auth(f: Callable) -> Callable:
    """
    Decorator to require a bearer token for handlers.

    The token is verified with the identity provider and the resolved
    account id is passed to the handler as `user_id`.

    Raises:
        UnauthorizedError: If the Authorization header is missing
        InvalidTokenError: If the token cannot be verified
    """
    @wraps(f)
    def wrapped(event: Dict[str, Any], *args: Any, **kwargs: Any) -> Dict[str, Any]:
        header = get_header(event, "Authorization")
        if not header or header[:len(BEARER_PREFIX)].lower() != BEARER_PREFIX.lower():
            raise UnauthorizedError()

        token = header[len(BEARER_PREFIX):].strip()
        if not token:
            raise UnauthorizedError()

        try:
            account = get_identity().verify_token(token)
        except InvalidTokenError:
            logger.warning("Rejected bearer token")
            raise

        return f(event, *args, user_id=account.uid, **kwargs)

    return wrapped
