"""
Account registration and sign-in.

Registration spans two systems: the identity provider owns the account and
the document store owns the user record. The record is written only after
the account exists, and if that write fails the account is deleted again so
no account is left without a record.
"""
from typing import Any, Dict

from pydantic import Field

from mealprep.models.base import ApiModel
from mealprep.models.user import MAX_DISPLAY_NAME_LENGTH
from mealprep.services.exceptions import (
    InternalError,
    MealPrepError,
    ValidationError,
    WeakPasswordError,
)
from mealprep.utils.logging import logger

MIN_PASSWORD_LENGTH = 8


class RegistrationRequest(ApiModel):
    """User registration request model."""
    email: str = ""
    password: str = Field("", repr=False)
    display_name: str = ""


class LoginRequest(ApiModel):
    email: str = ""
    password: str = Field("", repr=False)


def validate_registration(request: RegistrationRequest) -> None:
    """
    Check a registration request before any account is created.

    Credentials are checked before the display name, so a short password
    is reported as WEAK_PASSWORD even when other fields are also missing.

    Raises:
        ValidationError: If a field is missing or display_name is too long
        WeakPasswordError: If the password is shorter than 8 characters
    """
    missing = [
        field for field, value in (("email", request.email), ("password", request.password))
        if not value
    ]
    if missing:
        raise ValidationError(
            "Email, password and display name are required",
            details={"missing": missing}
        )
    if len(request.password) < MIN_PASSWORD_LENGTH:
        raise WeakPasswordError(details={"min_length": MIN_PASSWORD_LENGTH})
    if not request.display_name:
        raise ValidationError(
            "Email, password and display name are required",
            details={"missing": ["displayName"]}
        )
    if len(request.display_name) > MAX_DISPLAY_NAME_LENGTH:
        raise ValidationError(
            f"Display name must be at most {MAX_DISPLAY_NAME_LENGTH} characters",
            details={"field": "displayName"}
        )


def register_user(request: RegistrationRequest, identity, profiles) -> Dict[str, Any]:
    """
    Create an account and its user record.

    Args:
        request: Registration request
        identity: IdentityClient
        profiles: ProfileStore

    Returns:
        Dict with uid, email, displayName and idToken

    Raises:
        ValidationError, WeakPasswordError: On invalid input; nothing is created
        EmailExistsError, InvalidEmailError: When the provider rejects the account
        InternalError: When the user record cannot be written (account rolled back)
    """
    validate_registration(request)

    account = identity.sign_up(request.email, request.password, request.display_name)

    try:
        profiles.create(account.uid, account.email, request.display_name)
    except Exception as e:
        logger.error("Profile creation failed, rolling back account", extra={
            "uid": account.uid,
            "error_type": e.__class__.__name__
        })
        try:
            identity.delete_account(account.id_token)
        except MealPrepError:
            logger.exception("Account rollback failed", extra={"uid": account.uid})
        raise InternalError("Failed to create account") from e

    logger.info("Registered user", extra={"uid": account.uid})
    return {
        "uid": account.uid,
        "email": account.email,
        "displayName": request.display_name,
        "idToken": account.id_token
    }


def login_user(request: LoginRequest, identity, profiles) -> Dict[str, Any]:
    """
    Sign in with email and password.

    Returns:
        Dict with uid, email, displayName and idToken

    Raises:
        ValidationError: If email or password is missing
        InvalidCredentialsError: If the provider rejects the credentials
    """
    if not request.email or not request.password:
        raise ValidationError("Email and password are required")

    account = identity.sign_in(request.email, request.password)
    user = profiles.get(account.uid)
    display_name = user.display_name if user else account.display_name

    logger.info("User signed in", extra={"uid": account.uid, "has_profile": user is not None})
    return {
        "uid": account.uid,
        "email": account.email,
        "displayName": display_name,
        "idToken": account.id_token
    }
