"""
User model definitions: dietary profile, notification settings and the
explicit change set used by profile updates.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional
from pydantic import ConfigDict, Field, model_validator

from mealprep.models.base import ApiModel
from mealprep.models.recipe import SpiceLevel

MIN_CALORIE_TARGET = 300
MAX_CALORIE_TARGET = 1000
MAX_DISPLAY_NAME_LENGTH = 50

StorageDay = Literal[3, 5, 7]


class EmailFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    NEVER = "never"


class UserProfile(ApiModel):
    """
    Dietary preferences of one account.

    Defaults are the values every account starts with at registration.
    """
    allergies: List[str] = Field(default_factory=list)
    disliked_ingredients: List[str] = Field(default_factory=list)
    liked_ingredients: List[str] = Field(default_factory=list)
    cooking_time_preference: int = Field(30, ge=1)
    spice_level: SpiceLevel = SpiceLevel.NORMAL
    calorie_target: int = Field(500, ge=MIN_CALORIE_TARGET, le=MAX_CALORIE_TARGET)
    storage_day: StorageDay = 5


class TimeRange(ApiModel):
    start: str = Field("09:00", pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    end: str = Field("21:00", pattern=r"^([01]\d|2[0-3]):[0-5]\d$")


class PushSettings(ApiModel):
    enabled: bool = True
    new_recipe: bool = True
    weekly_recipe: bool = True
    updates: bool = False
    time_range: TimeRange = Field(default_factory=TimeRange)


class EmailSettings(ApiModel):
    enabled: bool = False
    frequency: EmailFrequency = EmailFrequency.WEEKLY


class NotificationSettings(ApiModel):
    push: PushSettings = Field(default_factory=PushSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)


class User(ApiModel):
    """
    Represents a registered account and its settings.
    """
    uid: str
    email: str
    display_name: str = Field(..., max_length=MAX_DISPLAY_NAME_LENGTH)
    profile_image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    is_active: bool = True
    profile: UserProfile = Field(default_factory=UserProfile)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)


class _ChangeSet(ApiModel):
    """
    Partial payload where only the fields actually sent are changed.

    A field left out of the payload is unchanged. A field sent as null
    would clear a required value, so it is rejected.
    """
    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _reject_explicit_nulls(self):
        cleared = [name for name in self.model_fields_set if getattr(self, name) is None]
        if cleared:
            raise ValueError(f"Fields cannot be cleared: {', '.join(sorted(cleared))}")
        return self

    def changes(self, prefix: str = "") -> Dict[str, Any]:
        """Map of attribute path to new value for every field that was sent."""
        result = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            path = f"{prefix}{name}"
            if isinstance(value, _ChangeSet):
                result.update(value.changes(prefix=f"{path}."))
            elif isinstance(value, ApiModel):
                result[path] = value.model_dump(mode="json")
            else:
                result[path] = value.value if isinstance(value, Enum) else value
        return result


class ProfilePatch(_ChangeSet):
    allergies: Optional[List[str]] = None
    disliked_ingredients: Optional[List[str]] = None
    liked_ingredients: Optional[List[str]] = None
    cooking_time_preference: Optional[int] = Field(None, ge=1)
    spice_level: Optional[SpiceLevel] = None
    calorie_target: Optional[int] = Field(None, ge=MIN_CALORIE_TARGET, le=MAX_CALORIE_TARGET)
    storage_day: Optional[StorageDay] = None


class ProfileUpdate(_ChangeSet):
    """
    Fields a user may change on their own record.

    `notifications` is replaced as a whole when sent; `profile` is merged
    field by field.
    """
    display_name: Optional[str] = Field(None, min_length=1, max_length=MAX_DISPLAY_NAME_LENGTH)
    profile_image_url: Optional[str] = None
    profile: Optional[ProfilePatch] = None
    notifications: Optional[NotificationSettings] = None

    @model_validator(mode="before")
    @classmethod
    def _lift_profile_fields(cls, data: Any) -> Any:
        """Accept preference fields at the top level as shorthand for `profile`."""
        if not isinstance(data, dict):
            return data
        names = set()
        for name, field in ProfilePatch.model_fields.items():
            names.update({name, field.alias})
        lifted = {key: value for key, value in data.items() if key in names}
        if not lifted:
            return data
        nested = data.get("profile") or {}
        if not isinstance(nested, dict):
            return data
        remaining = {key: value for key, value in data.items() if key not in names}
        remaining["profile"] = {**nested, **lifted}
        return remaining
