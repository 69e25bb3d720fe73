"""
Identity provider client.

Accounts live in an external identity service reached through its REST
API (Identity Toolkit `accounts:*` endpoints). This client only creates,
signs in, verifies and deletes accounts; user records are kept in the
document store by the profile service.
"""
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from aws_lambda_powertools import Logger

from mealprep.services.exceptions import (
    EmailExistsError,
    IdentityServiceError,
    InvalidCredentialsError,
    InvalidEmailError,
    InvalidTokenError,
    WeakPasswordError,
)

logger = Logger()

DEFAULT_BASE_URL = "https://identitytoolkit.googleapis.com/v1"
REQUEST_TIMEOUT = 10

# Provider error messages look like "WEAK_PASSWORD : Password should be ..."
_ERRORS = {
    "EMAIL_EXISTS": EmailExistsError,
    "WEAK_PASSWORD": WeakPasswordError,
    "INVALID_EMAIL": InvalidEmailError,
    "MISSING_EMAIL": InvalidEmailError,
    "EMAIL_NOT_FOUND": InvalidCredentialsError,
    "INVALID_PASSWORD": InvalidCredentialsError,
    "INVALID_LOGIN_CREDENTIALS": InvalidCredentialsError,
    "USER_DISABLED": InvalidCredentialsError,
    "INVALID_ID_TOKEN": InvalidTokenError,
    "TOKEN_EXPIRED": InvalidTokenError,
    "USER_NOT_FOUND": InvalidTokenError,
}


@dataclass
class IdentityAccount:
    """Account data returned by sign-up, sign-in and token lookup."""
    uid: str
    email: str
    id_token: Optional[str] = None
    display_name: Optional[str] = None


class IdentityClient:
    """Client for interacting with the identity provider."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        """
        Initialize identity client.

        Args:
            api_key: Provider API key, IDENTITY_API_KEY by default
            base_url: Provider endpoint, IDENTITY_BASE_URL by default

        Raises:
            EnvironmentError: If no API key is configured
        """
        self.api_key = api_key or os.environ.get("IDENTITY_API_KEY")
        if not self.api_key:
            raise EnvironmentError(
                "IDENTITY_API_KEY environment variable not set. "
                "This variable must be set to the identity provider API key."
            )
        self.base_url = (base_url or os.environ.get("IDENTITY_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")

    def _post(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Call an accounts endpoint and map provider errors.

        Args:
            method: Endpoint name, e.g. "signUp"
            payload: JSON body

        Returns:
            Parsed JSON response

        Raises:
            MealPrepError: Subclass matching the provider error code
            IdentityServiceError: For transport failures and unknown errors
        """
        try:
            response = requests.post(
                f"{self.base_url}/accounts:{method}",
                params={"key": self.api_key},
                json=payload,
                timeout=REQUEST_TIMEOUT
            )
        except requests.exceptions.RequestException as e:
            logger.error("Identity provider unreachable", extra={
                "method": method,
                "error_type": e.__class__.__name__
            })
            raise IdentityServiceError("Identity provider unreachable") from e

        if response.ok:
            return response.json()

        try:
            message = response.json().get("error", {}).get("message", "")
        except ValueError:
            message = ""
        provider_code = message.split(":")[0].strip()

        error_class = _ERRORS.get(provider_code)
        if error_class is not None:
            logger.info("Identity provider rejected request", extra={
                "method": method,
                "provider_code": provider_code
            })
            raise error_class()

        logger.error("Identity provider error", extra={
            "method": method,
            "status_code": response.status_code,
            "provider_code": provider_code
        })
        raise IdentityServiceError(f"Identity provider error on {method}")

    def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> IdentityAccount:
        """
        Create an email/password account.

        Returns:
            The new account with its id token
        """
        payload = {"email": email, "password": password, "returnSecureToken": True}
        if display_name:
            payload["displayName"] = display_name
        data = self._post("signUp", payload)
        return IdentityAccount(
            uid=data["localId"],
            email=data.get("email", email),
            id_token=data.get("idToken"),
            display_name=display_name
        )

    def sign_in(self, email: str, password: str) -> IdentityAccount:
        """
        Sign in with email and password.

        Returns:
            The account with a fresh id token
        """
        data = self._post("signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True
        })
        return IdentityAccount(
            uid=data["localId"],
            email=data.get("email", email),
            id_token=data.get("idToken"),
            display_name=data.get("displayName")
        )

    def verify_token(self, id_token: str) -> IdentityAccount:
        """
        Resolve a bearer token to its account.

        Raises:
            InvalidTokenError: If the token is invalid, expired or orphaned
        """
        data = self._post("lookup", {"idToken": id_token})
        users = data.get("users") or []
        if not users:
            raise InvalidTokenError()
        user = users[0]
        return IdentityAccount(
            uid=user["localId"],
            email=user.get("email", ""),
            display_name=user.get("displayName")
        )

    def delete_account(self, id_token: str) -> None:
        """Delete the account the token belongs to."""
        self._post("delete", {"idToken": id_token})
