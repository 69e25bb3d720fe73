"""
Tests for weekly menu persistence.
"""
import pytest
from datetime import datetime, timedelta, timezone

from factories import client_error, make_recipe
from mealprep.models.weekly_menu import ActiveState, DeletedState
from mealprep.services.exceptions import (
    DynamoDBAccessError,
    MenuNotFoundError,
    ValidationError,
)
from mealprep.services.weekly_menu import build_weekly_menu
from mealprep.services.weekly_menu_store import MAX_PAGE_SIZE, WeeklyMenuStore
from mealprep.utils.dynamo import decode_cursor, encode_cursor

START = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)

@pytest.fixture
def store(mock_dynamo):
    return WeeklyMenuStore(mock_dynamo, index_name="HistoryIndex"), mock_dynamo

def _menu(user_id="user-1", generated_at=START):
    recipes = [make_recipe(f"r{i}", ["chicken"]) for i in range(7)]
    return build_weekly_menu(recipes, ["chicken", "rice"], user_id, generated_at=generated_at)

def _stored(menu_id, user_id="user-1", generated_at=START, deleted_at=None):
    """Build the item as the store writes it."""
    menu = _menu(user_id, generated_at).model_copy(update={"id": menu_id})
    if deleted_at:
        menu = menu.model_copy(update={"lifecycle": DeletedState(deleted_at=deleted_at)})
    item = menu.model_dump(mode="json")
    item.update({"PK": f"MENU#{menu_id}", "SK": "METADATA"})
    if not deleted_at:
        item["history_pk"] = f"USER#{user_id}"
    return item

def test_save_writes_active_menu_in_history(store):
    """Test a saved menu gets an id and is placed in the user's history."""
    menu_store, mock_dynamo = store

    menu_id = menu_store.save("user-1", _menu())

    assert menu_id
    item = mock_dynamo.put_item.call_args[0][0]
    assert item["PK"] == f"MENU#{menu_id}"
    assert item["SK"] == "METADATA"
    assert item["history_pk"] == "USER#user-1"
    assert item["id"] == menu_id
    assert item["user_id"] == "user-1"
    assert item["lifecycle"] == {"status": "active"}
    assert item["is_deleted"] is False

def test_save_sort_key_is_fixed_width(store):
    """Test generated_at is stored with six fractional digits so it sorts by time."""
    menu_store, mock_dynamo = store

    menu_store.save("user-1", _menu(generated_at=START))
    menu_store.save("user-1", _menu(generated_at=START.replace(microsecond=500000)))

    whole, fraction = [c[0][0]["generated_at"] for c in mock_dynamo.put_item.call_args_list]
    assert whole == "2026-03-02T12:00:00.000000Z"
    assert fraction == "2026-03-02T12:00:00.500000Z"
    assert whole < fraction

def test_save_assigns_unique_ids(store):
    menu_store, _ = store
    assert menu_store.save("user-1", _menu()) != menu_store.save("user-1", _menu())

def test_save_store_error(store):
    menu_store, mock_dynamo = store
    mock_dynamo.put_item.side_effect = client_error("InternalServerError", "PutItem")

    with pytest.raises(DynamoDBAccessError):
        menu_store.save("user-1", _menu())

def test_get_returns_menu(store):
    menu_store, mock_dynamo = store
    mock_dynamo.get_item.return_value = _stored("m1")

    menu = menu_store.get("m1")

    assert menu.id == "m1"
    assert isinstance(menu.lifecycle, ActiveState)
    mock_dynamo.get_item.assert_called_once_with({"PK": "MENU#m1", "SK": "METADATA"})

def test_get_returns_deleted_menu(store):
    """Test soft-deleted menus stay readable by id."""
    menu_store, mock_dynamo = store
    mock_dynamo.get_item.return_value = _stored("m1", deleted_at=START)

    menu = menu_store.get("m1")

    assert menu.is_deleted
    assert menu.lifecycle.deleted_at == START

def test_get_missing(store):
    menu_store, _ = store
    assert menu_store.get("missing") is None

def test_list_for_user_newest_first(store):
    """Test history reads the index in descending generated_at order."""
    menu_store, mock_dynamo = store
    mock_dynamo.query_page.return_value = (
        [_stored("m2", generated_at=START + timedelta(days=7)), _stored("m1")],
        None
    )

    menus, cursor = menu_store.list_for_user("user-1", page_size=10)

    assert [m.id for m in menus] == ["m2", "m1"]
    assert cursor is None
    mock_dynamo.query_page.assert_called_once_with(
        index_name="HistoryIndex",
        partition_key="history_pk",
        partition_value="USER#user-1",
        limit=10,
        start_key=None,
        scan_forward=False
    )

def test_list_for_user_cursor_round_trip(store):
    """Test the cursor returned with a page resumes from its last key."""
    menu_store, mock_dynamo = store
    last_key = {"PK": "MENU#m1", "SK": "METADATA", "history_pk": "USER#user-1",
                "generated_at": START.isoformat()}
    mock_dynamo.query_page.return_value = ([_stored("m1")], last_key)

    _, cursor = menu_store.list_for_user("user-1", page_size=1)

    assert cursor == encode_cursor(last_key)
    assert decode_cursor(cursor) == last_key

    mock_dynamo.query_page.return_value = ([], None)
    menu_store.list_for_user("user-1", page_size=1, cursor=cursor)

    assert mock_dynamo.query_page.call_args.kwargs["start_key"] == last_key

@pytest.mark.parametrize("page_size", [0, MAX_PAGE_SIZE + 1])
def test_list_for_user_page_size_bounds(store, page_size):
    menu_store, mock_dynamo = store
    with pytest.raises(ValidationError):
        menu_store.list_for_user("user-1", page_size=page_size)
    assert not mock_dynamo.query_page.called

def test_list_for_user_bad_cursor(store):
    menu_store, _ = store
    with pytest.raises(ValidationError):
        menu_store.list_for_user("user-1", cursor="not-a-cursor!")

def test_soft_delete_removes_from_history(store):
    """Test soft delete flips the lifecycle and drops the history key."""
    menu_store, mock_dynamo = store
    mock_dynamo.update_item.return_value = _stored("m1", deleted_at=START)

    menu = menu_store.soft_delete("m1")

    assert menu.is_deleted
    kwargs = mock_dynamo.update_item.call_args.kwargs
    assert kwargs["key"] == {"PK": "MENU#m1", "SK": "METADATA"}
    assert "REMOVE history_pk" in kwargs["update_expression"]
    assert kwargs["expression_values"][":lifecycle"]["status"] == "deleted"
    assert kwargs["expression_values"][":deleted"] is True
    assert kwargs["condition_expression"] == "attribute_exists(PK)"

def test_soft_delete_missing_menu(store):
    """Test a failed existence condition means the menu is not found."""
    menu_store, mock_dynamo = store
    mock_dynamo.update_item.side_effect = client_error("ConditionalCheckFailedException")

    with pytest.raises(MenuNotFoundError):
        menu_store.soft_delete("missing")

def test_update_store_error(store):
    menu_store, mock_dynamo = store
    mock_dynamo.update_item.side_effect = client_error("ThrottlingException")

    with pytest.raises(DynamoDBAccessError):
        menu_store.set_favorite("m1", True)

def test_soft_delete_all_walks_every_page(store):
    """Test every page is collected before the menus are deleted."""
    menu_store, mock_dynamo = store
    last_key = {"PK": "MENU#m2", "SK": "METADATA"}
    mock_dynamo.query_page.side_effect = [
        ([_stored("m3"), _stored("m2")], last_key),
        ([_stored("m1")], None)
    ]
    mock_dynamo.update_item.return_value = _stored("m1", deleted_at=START)

    deleted = menu_store.soft_delete_all("user-1")

    assert deleted == 3
    assert mock_dynamo.query_page.call_count == 2
    assert mock_dynamo.query_page.call_args_list[1].kwargs["start_key"] == last_key
    deleted_keys = [c.kwargs["key"]["PK"] for c in mock_dynamo.update_item.call_args_list]
    assert deleted_keys == ["MENU#m3", "MENU#m2", "MENU#m1"]

def test_soft_delete_all_empty_history(store):
    menu_store, mock_dynamo = store
    mock_dynamo.query_page.return_value = ([], None)

    assert menu_store.soft_delete_all("user-1") == 0
    assert not mock_dynamo.update_item.called

def test_set_favorite(store):
    menu_store, mock_dynamo = store
    item = _stored("m1")
    item["user_actions"]["is_favorite"] = True
    mock_dynamo.update_item.return_value = item

    menu = menu_store.set_favorite("m1", True)

    assert menu.user_actions.is_favorite
    assert mock_dynamo.update_item.call_args.kwargs["expression_values"] == {":favorite": True}

def test_increment_regeneration_is_atomic_update(store):
    """Test the counter is incremented in the store, not read-modify-write."""
    menu_store, mock_dynamo = store
    item = _stored("m1")
    item["user_actions"]["regeneration_count"] = 1
    mock_dynamo.update_item.return_value = item

    menu = menu_store.increment_regeneration("m1")

    assert menu.user_actions.regeneration_count == 1
    kwargs = mock_dynamo.update_item.call_args.kwargs
    assert "if_not_exists" in kwargs["update_expression"]
    assert kwargs["expression_values"] == {":zero": 0, ":one": 1}
    assert not mock_dynamo.get_item.called

def test_touch_sets_last_accessed(store):
    menu_store, mock_dynamo = store
    item = _stored("m1")
    item["user_actions"]["last_accessed_at"] = START.isoformat()
    mock_dynamo.update_item.return_value = item

    menu = menu_store.touch("m1")

    assert menu.user_actions.last_accessed_at == START
    assert ":accessed" in mock_dynamo.update_item.call_args.kwargs["expression_values"]
