"""
字段编码 / 读取测试共享 Fixtures

构造一个覆盖所有字段类型的 List 和一个两人的用户名册。
"""

from unittest.mock import AsyncMock

import pytest

from zenkit.providers.zenkit.list_info import ListInfo
from zenkit.providers.zenkit.managers.user_roster import UserRoster
from zenkit.schemas.zenkit import Element, ListSummary, User

WORKSPACE_ID = 42
REF_UUID = "5e6f7a8b-9c0d-4e1f-a2b3-c4d5e6f7a8b9"


def field_uuid(n: int) -> str:
    return f"f{n:07d}-0000-4000-8000-000000000000"


def make_element(n, name, category, **element_data):
    return Element.model_validate(
        {
            "id": n,
            "shortId": f"fld{n}",
            "uuid": field_uuid(n),
            "name": name,
            "elementcategory": category,
            "elementData": element_data,
        }
    )


STATUS_CHOICES = [
    {"id": 6, "uuid": "c0000006-0000-4000-8000-000000000000", "name": "Todo"},
    {"id": 7, "uuid": "c0000007-0000-4000-8000-000000000000", "name": "Done"},
]
LABEL_CHOICES = [
    {"id": 1, "uuid": "c0000001-0000-4000-8000-000000000000", "name": "Urgent"},
    {"id": 2, "uuid": "c0000002-0000-4000-8000-000000000000", "name": "Later"},
]


def build_list_info() -> ListInfo:
    summary = ListSummary(
        id=7,
        short_id="l7",
        uuid="a1b2c3d4-e5f6-4a7b-8c9d-0e1f2a3b4c5d",
        name="Tasks",
        workspace_id=WORKSPACE_ID,
    )
    fields = (
        make_element(1, "Title", 1),
        make_element(2, "Estimate", 2, format={"name": "integer"}),
        make_element(3, "Budget", 2, format={"name": "decimal"}),
        make_element(4, "Ratio", 2),
        make_element(5, "Website", 3),
        make_element(6, "Due", 4),
        make_element(7, "Owner", 14, multiple=False),
        make_element(8, "Reviewers", 14, multiple=True),
        make_element(9, "Status", 6, multiple=False, predefinedCategories=STATUS_CHOICES),
        make_element(10, "Labels", 6, multiple=True, predefinedCategories=LABEL_CHOICES),
        make_element(11, "Parent", 16, multiple=False),
        make_element(12, "Related", 16, multiple=True),
        make_element(13, "Attachments", 15),
    )
    return ListInfo(summary, fields)


USERS = [
    User(id=1, uuid="00000001-0000-4000-8000-000000000000", display_name="alice", full_name="Alice Liddell"),
    User(id=2, uuid="00000002-0000-4000-8000-000000000000", display_name="bob", full_name="Bob Builder"),
]


@pytest.fixture
def list_info():
    return build_list_info()


@pytest.fixture
def mock_user_api():
    """模拟 UserAPI"""
    api = AsyncMock()
    api.get_workspace_users.return_value = list(USERS)
    return api


@pytest.fixture
def roster(mock_user_api):
    return UserRoster(WORKSPACE_ID, mock_user_api)
