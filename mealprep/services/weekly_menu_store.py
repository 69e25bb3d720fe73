"""
Weekly menu persistence.

Menus are stored one item per menu under `MENU#{id}`. Active menus also
carry a `history_pk` attribute that places them in the sparse history
index (partition `USER#{uid}`, sort `generated_at`); soft delete removes
that attribute, so a deleted menu disappears from history listings while
staying readable by id.

Typical usage:
    store = WeeklyMenuStore(get_dynamo())
    menu_id = store.save(user_id, menu)
    menus, cursor = store.list_for_user(user_id, page_size=20)
"""
import os
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from mealprep.models.weekly_menu import ActiveState, DeletedState, WeeklyMenu
from mealprep.services.exceptions import (
    DynamoDBAccessError,
    MenuNotFoundError,
    ValidationError,
)
from mealprep.utils.dynamo import (
    METADATA_SK,
    create_menu_pk,
    create_pk,
    decode_cursor,
    encode_cursor,
    format_sort_timestamp,
)

logger = Logger()

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_MENU_EXISTS = "attribute_exists(PK)"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class WeeklyMenuStore:
    """Service for storing and querying generated weekly menus."""

    def __init__(self, dynamo, index_name: Optional[str] = None):
        """
        Initialize weekly menu store.

        Args:
            dynamo: DynamoDB client
            index_name: History index name, HISTORY_INDEX_NAME by default
        """
        self.dynamo = dynamo
        self.index_name = index_name or os.environ.get('HISTORY_INDEX_NAME', 'HistoryIndex')

    def _key(self, menu_id: str) -> dict:
        return {"PK": create_menu_pk(menu_id), "SK": METADATA_SK}

    def _update(self, menu_id: str, operation: str, **kwargs) -> dict:
        """Apply an update to an existing menu, translating store errors."""
        try:
            return self.dynamo.update_item(
                key=self._key(menu_id),
                condition_expression=_MENU_EXISTS,
                **kwargs
            )
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code')
            if error_code == "ConditionalCheckFailedException":
                raise MenuNotFoundError(details={"menu_id": menu_id}) from e
            logger.error("Weekly menu update failed", extra={
                "menu_id": menu_id,
                "operation": operation,
                "error_code": error_code
            })
            raise DynamoDBAccessError(f"Failed to {operation} weekly menu") from e

    def save(self, user_id: str, menu: WeeklyMenu) -> str:
        """
        Persist a new menu and assign its id.

        Args:
            user_id: Owner of the menu
            menu: Menu to store; its id and lifecycle are overwritten

        Returns:
            The new menu id
        """
        menu_id = uuid.uuid4().hex
        stored = menu.model_copy(update={
            "id": menu_id,
            "user_id": user_id,
            "lifecycle": ActiveState()
        })
        item = stored.model_dump(mode="json")
        item.update({
            "PK": create_menu_pk(menu_id),
            "SK": METADATA_SK,
            "history_pk": create_pk(user_id),
            "generated_at": format_sort_timestamp(stored.generated_at)
        })

        try:
            self.dynamo.put_item(item)
        except ClientError as e:
            logger.error("Failed to save weekly menu", extra={
                "user_id": user_id,
                "error_code": e.response.get('Error', {}).get('Code')
            })
            raise DynamoDBAccessError("Failed to save weekly menu") from e

        logger.info("Saved weekly menu", extra={"user_id": user_id, "menu_id": menu_id})
        return menu_id

    def get(self, menu_id: str) -> Optional[WeeklyMenu]:
        """
        Get a menu by id, including soft-deleted menus.

        Returns:
            WeeklyMenu if found, None otherwise
        """
        try:
            item = self.dynamo.get_item(self._key(menu_id))
        except ClientError as e:
            raise DynamoDBAccessError("Failed to read weekly menu") from e
        return WeeklyMenu(**item) if item else None

    def list_for_user(
        self,
        user_id: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        cursor: Optional[str] = None
    ) -> Tuple[List[WeeklyMenu], Optional[str]]:
        """
        Get one page of a user's menu history, newest first.

        Soft-deleted menus are not in the history index, so they never
        appear here.

        Args:
            user_id: Owner of the menus
            page_size: Number of menus per page (1-100)
            cursor: Token returned with the previous page

        Returns:
            Tuple of (menus, cursor for the next page or None)

        Raises:
            ValidationError: If page_size is out of range or cursor is malformed
        """
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValidationError(
                f"pageSize must be between 1 and {MAX_PAGE_SIZE}",
                details={"page_size": page_size}
            )
        try:
            start_key = decode_cursor(cursor)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        try:
            items, last_key = self.dynamo.query_page(
                index_name=self.index_name,
                partition_key="history_pk",
                partition_value=create_pk(user_id),
                limit=page_size,
                start_key=start_key,
                scan_forward=False
            )
        except ClientError as e:
            logger.error("Failed to list weekly menus", extra={
                "user_id": user_id,
                "error_code": e.response.get('Error', {}).get('Code')
            })
            raise DynamoDBAccessError("Failed to list weekly menus") from e

        menus = [WeeklyMenu(**item) for item in items]
        return menus, encode_cursor(last_key)

    def soft_delete(self, menu_id: str) -> WeeklyMenu:
        """
        Mark a menu deleted without removing it.

        Raises:
            MenuNotFoundError: If the menu does not exist
        """
        lifecycle = DeletedState(deleted_at=datetime.now(timezone.utc))
        attributes = self._update(
            menu_id,
            "delete",
            update_expression="SET #lifecycle = :lifecycle, is_deleted = :deleted REMOVE history_pk",
            expression_names={"#lifecycle": "lifecycle"},
            expression_values={
                ":lifecycle": lifecycle.model_dump(mode="json"),
                ":deleted": True
            }
        )
        logger.info("Soft-deleted weekly menu", extra={"menu_id": menu_id})
        return WeeklyMenu(**attributes)

    def soft_delete_all(self, user_id: str) -> int:
        """
        Soft-delete every active menu of a user.

        Returns:
            Number of menus deleted
        """
        menu_ids = []
        cursor = None
        while True:
            menus, cursor = self.list_for_user(user_id, page_size=MAX_PAGE_SIZE, cursor=cursor)
            menu_ids.extend(menu.id for menu in menus)
            if not cursor:
                break

        for menu_id in menu_ids:
            self.soft_delete(menu_id)
        deleted = len(menu_ids)

        logger.info("Soft-deleted menu history", extra={"user_id": user_id, "count": deleted})
        return deleted

    def set_favorite(self, menu_id: str, is_favorite: bool) -> WeeklyMenu:
        """
        Set the favorite flag of a menu.

        Raises:
            MenuNotFoundError: If the menu does not exist
        """
        attributes = self._update(
            menu_id,
            "favorite",
            update_expression="SET user_actions.is_favorite = :favorite",
            expression_values={":favorite": is_favorite}
        )
        return WeeklyMenu(**attributes)

    def increment_regeneration(self, menu_id: str) -> WeeklyMenu:
        """
        Atomically add one to a menu's regeneration counter.

        Raises:
            MenuNotFoundError: If the menu does not exist
        """
        attributes = self._update(
            menu_id,
            "increment",
            update_expression=(
                "SET user_actions.regeneration_count = "
                "if_not_exists(user_actions.regeneration_count, :zero) + :one"
            ),
            expression_values={":zero": 0, ":one": 1}
        )
        return WeeklyMenu(**attributes)

    def touch(self, menu_id: str) -> WeeklyMenu:
        """
        Record that the owner opened a menu.

        Raises:
            MenuNotFoundError: If the menu does not exist
        """
        attributes = self._update(
            menu_id,
            "touch",
            update_expression="SET user_actions.last_accessed_at = :accessed",
            expression_values={":accessed": _now()}
        )
        return WeeklyMenu(**attributes)
