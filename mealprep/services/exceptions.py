"""
Service-level exceptions.

Every error a request can end in derives from MealPrepError, which carries
the HTTP status and the machine-readable code the API returns for it.
Collaborator failures are wrapped into InternalError subclasses at the
boundary of the operation that saw them.
"""
from typing import Any, Dict, Optional

class MealPrepError(Exception):
    """Base exception for all errors surfaced through the API."""

    status_code = 500
    code = "INTERNAL_SERVER_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

class ValidationError(MealPrepError):
    """Raised when input is malformed or out of range."""
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"

    @classmethod
    def from_pydantic(cls, error) -> "ValidationError":
        """Build from a pydantic ValidationError, keeping one message per field."""
        fields = {}
        for detail in error.errors():
            location = ".".join(str(part) for part in detail.get("loc", ())) or "body"
            fields.setdefault(location, detail.get("msg", "Invalid value"))
        message = "; ".join(f"{loc}: {msg}" for loc, msg in fields.items())
        return cls(message or cls.default_message, details={"fields": fields})

class WeakPasswordError(ValidationError):
    """Raised when a password does not meet the minimum strength."""
    code = "WEAK_PASSWORD"
    default_message = "Password must be at least 8 characters"

class InvalidEmailError(ValidationError):
    """Raised when the identity provider rejects an email address."""
    code = "INVALID_EMAIL"
    default_message = "Email address is not valid"

class UnauthorizedError(MealPrepError):
    """Raised when a request carries no bearer credential."""
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authorization token required"

class InvalidTokenError(UnauthorizedError):
    """Raised when a bearer credential cannot be verified."""
    code = "INVALID_TOKEN"
    default_message = "Invalid token"

class InvalidCredentialsError(UnauthorizedError):
    """Raised when an email and password do not match an account."""
    code = "INVALID_CREDENTIALS"
    default_message = "Email or password is incorrect"

class NotFoundError(MealPrepError):
    """Raised when a referenced entity does not exist."""
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"

class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"
    default_message = "User not found"

class MenuNotFoundError(NotFoundError):
    code = "MENU_NOT_FOUND"
    default_message = "Weekly menu not found"

class EmailExistsError(MealPrepError):
    """Raised when an account already exists for the email."""
    status_code = 409
    code = "EMAIL_EXISTS"
    default_message = "This email address is already in use"

class InsufficientIngredientsError(MealPrepError):
    """Raised when too few ingredients are selected to generate a menu."""
    status_code = 400
    code = "INSUFFICIENT_INGREDIENTS"
    default_message = "At least 2 ingredients are required to generate recipes"

class GenerationFailedError(MealPrepError):
    """Raised when the candidate pool cannot fill a week."""
    status_code = 400
    code = "GENERATION_FAILED"
    default_message = "Not enough recipes match the selected ingredients"

class InternalError(MealPrepError):
    """Raised for unexpected collaborator failures."""
    pass

class DynamoDBAccessError(InternalError):
    """Raised when there is an error accessing DynamoDB."""
    pass

class IdentityServiceError(InternalError):
    """Raised when the identity provider fails unexpectedly."""
    pass
