"""
Tests for account registration and sign-in.
"""
import pytest
from unittest.mock import Mock

from factories import client_error
from mealprep.models.user import User
from mealprep.services.exceptions import (
    EmailExistsError,
    IdentityServiceError,
    InternalError,
    InvalidCredentialsError,
    ValidationError,
    WeakPasswordError,
)
from mealprep.services.registration import (
    LoginRequest,
    RegistrationRequest,
    login_user,
    register_user,
)
from mealprep.utils.identity import IdentityAccount

@pytest.fixture
def identity():
    identity = Mock()
    identity.sign_up.return_value = IdentityAccount(uid="user-1", email="a@example.com", id_token="token-1")
    identity.sign_in.return_value = IdentityAccount(uid="user-1", email="a@example.com", id_token="token-2")
    return identity

@pytest.fixture
def profiles():
    return Mock()

def test_register_creates_account_and_record(identity, profiles):
    """Test a valid request creates the account, then the record."""
    request = RegistrationRequest(email="a@example.com", password="longenough", display_name="Aki")

    result = register_user(request, identity, profiles)

    assert result == {
        "uid": "user-1",
        "email": "a@example.com",
        "displayName": "Aki",
        "idToken": "token-1"
    }
    identity.sign_up.assert_called_once_with("a@example.com", "longenough", "Aki")
    profiles.create.assert_called_once_with("user-1", "a@example.com", "Aki")

def test_register_weak_password_creates_nothing(identity, profiles):
    """Test a five character password is WEAK_PASSWORD even without a display name."""
    request = RegistrationRequest.model_validate({"email": "a@example.com", "password": "12345"})

    with pytest.raises(WeakPasswordError) as exc:
        register_user(request, identity, profiles)

    assert exc.value.code == "WEAK_PASSWORD"
    assert exc.value.status_code == 400
    assert not identity.sign_up.called
    assert not profiles.create.called

@pytest.mark.parametrize("payload", [
    {"password": "longenough", "displayName": "Aki"},
    {"email": "a@example.com", "displayName": "Aki"},
    {"email": "a@example.com", "password": "longenough"},
    {"email": "a@example.com", "password": "longenough", "displayName": "x" * 51},
])
def test_register_invalid_request(identity, profiles, payload):
    request = RegistrationRequest.model_validate(payload)

    with pytest.raises(ValidationError) as exc:
        register_user(request, identity, profiles)

    assert exc.value.code == "VALIDATION_ERROR"
    assert not identity.sign_up.called

def test_register_existing_email(identity, profiles):
    identity.sign_up.side_effect = EmailExistsError()
    request = RegistrationRequest(email="a@example.com", password="longenough", display_name="Aki")

    with pytest.raises(EmailExistsError):
        register_user(request, identity, profiles)

    assert not profiles.create.called

def test_register_rolls_back_account(identity, profiles):
    """Test the account is deleted when the record cannot be written."""
    profiles.create.side_effect = client_error("InternalServerError", "PutItem")
    request = RegistrationRequest(email="a@example.com", password="longenough", display_name="Aki")

    with pytest.raises(InternalError):
        register_user(request, identity, profiles)

    identity.delete_account.assert_called_once_with("token-1")

def test_register_rollback_failure_still_reports(identity, profiles):
    profiles.create.side_effect = client_error("InternalServerError", "PutItem")
    identity.delete_account.side_effect = IdentityServiceError()
    request = RegistrationRequest(email="a@example.com", password="longenough", display_name="Aki")

    with pytest.raises(InternalError):
        register_user(request, identity, profiles)

def test_login_uses_record_display_name(identity, profiles):
    profiles.get.return_value = User(
        uid="user-1",
        email="a@example.com",
        display_name="Aki",
        created_at="2026-03-02T12:00:00Z",
        updated_at="2026-03-02T12:00:00Z"
    )

    result = login_user(LoginRequest(email="a@example.com", password="longenough"), identity, profiles)

    assert result["uid"] == "user-1"
    assert result["displayName"] == "Aki"
    assert result["idToken"] == "token-2"

def test_login_without_record(identity, profiles):
    profiles.get.return_value = None

    result = login_user(LoginRequest(email="a@example.com", password="longenough"), identity, profiles)

    assert result["displayName"] is None

def test_login_bad_credentials(identity, profiles):
    identity.sign_in.side_effect = InvalidCredentialsError()

    with pytest.raises(InvalidCredentialsError):
        login_user(LoginRequest(email="a@example.com", password="wrong-pass"), identity, profiles)

def test_login_requires_fields(identity, profiles):
    with pytest.raises(ValidationError):
        login_user(LoginRequest(email="a@example.com"), identity, profiles)
    assert not identity.sign_in.called
