"""
Profile store for user records and dietary preferences.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError
from pydantic import ValidationError as PydanticValidationError

from mealprep.models.user import (
    MAX_DISPLAY_NAME_LENGTH,
    NotificationSettings,
    ProfileUpdate,
    User,
    UserProfile,
)
from mealprep.services.exceptions import (
    DynamoDBAccessError,
    EmailExistsError,
    UserNotFoundError,
    ValidationError,
)
from mealprep.utils.dynamo import PROFILE_SK, create_pk

logger = Logger()


def parse_profile_update(payload: Dict[str, Any]) -> ProfileUpdate:
    """
    Validate a partial user payload into a change set.

    Raises:
        ValidationError: If a field is unknown, null or out of range
    """
    try:
        return ProfileUpdate.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


class ProfileStore:
    """Service for reading and updating user records."""

    def __init__(self, dynamo):
        self.dynamo = dynamo

    def _key(self, uid: str) -> dict:
        return {"PK": create_pk(uid), "SK": PROFILE_SK}

    def get(self, uid: str) -> Optional[User]:
        """
        Get a user record.

        Args:
            uid: Identity provider user id

        Returns:
            User if found, None otherwise
        """
        try:
            item = self.dynamo.get_item(self._key(uid))
        except ClientError as e:
            raise DynamoDBAccessError("Failed to read user profile") from e
        return User(**item) if item else None

    def create(self, uid: str, email: str, display_name: str) -> User:
        """
        Create the user record written at registration.

        The dietary profile and notification settings start from their
        defaults: no allergies or likes, 30 minute cooking time, normal
        spice, 500 kcal per meal, 5 storage days.

        Args:
            uid: Identity provider user id
            email: Account email
            display_name: Name shown in the app

        Returns:
            The stored user

        Raises:
            ValidationError: If display_name is empty or longer than 50 characters
            EmailExistsError: If a record already exists for uid
        """
        if not display_name or len(display_name) > MAX_DISPLAY_NAME_LENGTH:
            raise ValidationError(
                f"Display name must be 1-{MAX_DISPLAY_NAME_LENGTH} characters",
                details={"field": "displayName"}
            )

        now = datetime.now(timezone.utc)
        user = User(
            uid=uid,
            email=email,
            display_name=display_name,
            created_at=now,
            updated_at=now,
            profile=UserProfile(),
            notifications=NotificationSettings()
        )

        try:
            self.dynamo.put_item(
                {**self._key(uid), **user.model_dump(mode="json")},
                condition_expression="attribute_not_exists(PK)"
            )
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code')
            if error_code == "ConditionalCheckFailedException":
                raise EmailExistsError("A profile already exists for this account") from e
            logger.error("Failed to create user profile", extra={
                "uid": uid,
                "error_code": error_code
            })
            raise DynamoDBAccessError("Failed to create user profile") from e

        logger.info("Created user profile", extra={"uid": uid})
        return user

    def update(self, uid: str, changes: Union[ProfileUpdate, Dict[str, Any]]) -> User:
        """
        Merge a change set into a user record.

        Only the fields present in `changes` are written; nested profile
        fields are set individually so untouched preferences keep their
        values.

        Args:
            uid: Identity provider user id
            changes: Change set, or a raw payload to validate into one

        Returns:
            The updated user

        Raises:
            ValidationError: If a raw payload fails validation
            UserNotFoundError: If the user has no record
        """
        if not isinstance(changes, ProfileUpdate):
            changes = parse_profile_update(changes)

        fields = changes.changes()
        if not fields:
            user = self.get(uid)
            if user is None:
                raise UserNotFoundError()
            return user

        fields["updated_at"] = datetime.now(timezone.utc).isoformat()

        names = {}
        values = {}
        assignments = []
        for index, (path, value) in enumerate(sorted(fields.items())):
            placeholders = []
            for part in path.split("."):
                placeholder = f"#{part}"
                names[placeholder] = part
                placeholders.append(placeholder)
            values[f":v{index}"] = value
            assignments.append(f"{'.'.join(placeholders)} = :v{index}")

        try:
            attributes = self.dynamo.update_item(
                key=self._key(uid),
                update_expression="SET " + ", ".join(assignments),
                expression_values=values,
                expression_names=names,
                condition_expression="attribute_exists(PK)"
            )
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code')
            if error_code == "ConditionalCheckFailedException":
                raise UserNotFoundError() from e
            logger.error("Failed to update user profile", extra={
                "uid": uid,
                "error_code": error_code
            })
            raise DynamoDBAccessError("Failed to update user profile") from e

        logger.info("Updated user profile", extra={"uid": uid, "fields": sorted(fields)})
        return User(**attributes)
