from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from zenkit.schemas.zenkit import (
    Element,
    ElementCategoryId,
    Entry,
    ErrorResult,
    ListSummary,
    NumericType,
    UpdateAction,
    Workspace,
)


def test_workspace_parsing():
    raw = {
        "id": 1,
        "shortId": "abc",
        "uuid": "0d7b9a8e-1c2f-4e3a-8b5d-6f7a8b9c0d1e",
        "name": "Marketing",
        "unknown_field": "ignore_me",
        "lists": [
            {"id": 2, "uuid": "u2", "name": "Tasks", "workspaceId": 1, "sortOrder": 1}
        ],
    }

    ws = Workspace.model_validate(raw)
    assert ws.short_id == "abc"
    assert ws.lists[0].workspace_id == 1
    # Ensure extra fields are ignored
    assert not hasattr(ws, "unknown_field")


@pytest.mark.parametrize("raw,expected", [(1, 1.0), (1.399964, 1.399964), ("-99", -99.0)])
def test_sort_order_forms(raw, expected):
    summary = ListSummary.model_validate(
        {"id": 1, "uuid": "u", "workspaceId": 1, "sortOrder": raw}
    )
    assert summary.sort_order == expected


def test_sort_order_rejects_text():
    with pytest.raises(ValidationError):
        ListSummary.model_validate(
            {"id": 1, "uuid": "u", "workspaceId": 1, "sortOrder": "high"}
        )


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2024-03-01", datetime(2024, 3, 1, tzinfo=timezone.utc)),
        ("2024-03-01T10:00:00Z", datetime(2024, 3, 1, 10, tzinfo=timezone.utc)),
        ("2024-03-01T12:00:00+02:00", datetime(2024, 3, 1, 10, tzinfo=timezone.utc)),
        ("2024-03-01T10:00:00", datetime(2024, 3, 1, 10, tzinfo=timezone.utc)),
    ],
)
def test_datetime_normalized_to_utc(raw, expected):
    entry = Entry.model_validate({"id": 1, "uuid": "u", "created_at": raw})
    assert entry.created_at == expected
    assert entry.created_at.utcoffset().total_seconds() == 0


def test_entry_keeps_business_fields():
    entry = Entry.model_validate(
        {"id": 1, "uuid": "u", "displayString": None, "abc_text": "hello"}
    )
    assert entry.display_string == ""
    assert entry.fields == {"abc_text": "hello"}


def test_element_numeric_type():
    number = Element.model_validate(
        {
            "id": 1,
            "uuid": "u",
            "name": "Estimate",
            "elementcategory": 2,
            "elementData": {"format": {"name": "decimal"}},
        }
    )
    text = Element.model_validate(
        {"id": 2, "uuid": "v", "name": "Title", "elementcategory": 1}
    )

    assert number.element_category == ElementCategoryId.NUMBER
    assert number.numeric_type() == NumericType.DECIMAL
    assert text.numeric_type() is None
    assert text.choices == []


def test_update_action_from_char():
    assert UpdateAction.from_char("=") == UpdateAction.REPLACE
    assert UpdateAction.from_char("+") == UpdateAction.APPEND
    assert UpdateAction.from_char("-") == UpdateAction.REMOVE
    assert UpdateAction.from_char("?") == UpdateAction.NULL


def test_error_result():
    raw = {
        "error": {
            "name": "ResourceNotFound",
            "code": "000001",
            "statusCode": 404,
            "message": "Not found",
            "description": "",
        }
    }
    result = ErrorResult.model_validate(raw)
    assert result.error.status_code == 404
    assert result.error.code == "000001"
