"""
ReferenceCache 测试模块

测试覆盖:
1. resolve_workspace - 按 id 单对象拉取、按名称全量拉取、缓存命中、未找到
2. get_all_workspaces_and_lists - 只拉取一次
3. resolve_field_schema - 按 workspace 范围缓存、List 不存在
4. 用户相关 - get_user_id、reload_users
5. 缓存管理 - clear_*，只清空空间缓存时字段定义仍命中
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from zenkit.core.errors import NotFoundError, ValidationError
from zenkit.core.identifiers import AllId
from zenkit.providers.zenkit.managers.reference_cache import ReferenceCache
from zenkit.schemas.zenkit import Element, ListSummary, User, Workspace

WS_UUID = "0d7b9a8e-1c2f-4e3a-8b5d-6f7a8b9c0d1e"


def make_list(id, name, workspace_id):
    return ListSummary(
        id=id,
        short_id=f"l{id}",
        uuid=f"{id:08d}-1111-4111-8111-111111111111",
        name=name,
        workspace_id=workspace_id,
    )


def make_workspace(id, name, uuid=None, lists=()):
    return Workspace(
        id=id,
        short_id=f"ws{id}",
        uuid=uuid or f"{id:08d}-2222-4222-8222-222222222222",
        name=name,
        lists=list(lists),
    )


WS_42 = make_workspace(42, "Engineering", WS_UUID, [make_list(7, "Tasks", 42)])
WS_43 = make_workspace(43, "Sales", lists=[make_list(8, "Tasks", 43)])


@pytest.fixture
def mock_workspace_api():
    """模拟 WorkspaceAPI"""
    api = AsyncMock()
    api.get_workspace.return_value = WS_42
    api.get_all_workspaces_and_lists.return_value = [WS_42, WS_43]
    return api


@pytest.fixture
def mock_list_api():
    """模拟 ListAPI"""
    api = AsyncMock()
    api.get_list_elements.return_value = [
        Element(id=1, uuid="e1", name="Title", element_category=1)
    ]
    return api


@pytest.fixture
def mock_user_api():
    """模拟 UserAPI"""
    api = AsyncMock()
    api.get_workspace_users.return_value = [
        User(id=1, uuid="u1", display_name="alice", full_name="Alice")
    ]
    return api


@pytest.fixture
def cache(mock_workspace_api, mock_list_api, mock_user_api):
    """创建 ReferenceCache 实例"""
    return ReferenceCache(
        workspace_api=mock_workspace_api,
        list_api=mock_list_api,
        user_api=mock_user_api,
    )


class TestResolveWorkspace:
    """测试 resolve_workspace 方法"""

    @pytest.mark.asyncio
    async def test_fetch_by_id(self, cache, mock_workspace_api):
        """测试数字 ID 触发单对象拉取，第二次命中缓存"""
        first = await cache.resolve_workspace("42")
        second = await cache.resolve_workspace("42")

        assert first.id == 42
        assert second is first
        mock_workspace_api.get_workspace.assert_called_once_with("42")
        mock_workspace_api.get_all_workspaces_and_lists.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetch_by_int(self, cache, mock_workspace_api):
        """测试 int 参数"""
        ws = await cache.resolve_workspace(42)
        assert ws.name == "Engineering"
        mock_workspace_api.get_workspace.assert_called_once_with("42")

    @pytest.mark.asyncio
    async def test_fetch_by_uuid(self, cache, mock_workspace_api):
        """测试 UUID 触发单对象拉取"""
        ws = await cache.resolve_workspace(WS_UUID)
        assert ws.id == 42
        mock_workspace_api.get_workspace.assert_called_once_with(WS_UUID)

    @pytest.mark.asyncio
    async def test_fetch_by_name(self, cache, mock_workspace_api):
        """测试名称触发全量拉取"""
        ws = await cache.resolve_workspace("Sales")

        assert ws.id == 43
        mock_workspace_api.get_all_workspaces_and_lists.assert_called_once()
        mock_workspace_api.get_workspace.assert_not_called()

    @pytest.mark.asyncio
    async def test_name_not_found(self, cache, mock_workspace_api):
        """测试名称不存在"""
        with pytest.raises(NotFoundError) as exc_info:
            await cache.resolve_workspace("Marketing")

        assert "未找到" in str(exc_info.value)
        mock_workspace_api.get_all_workspaces_and_lists.assert_called_once()

    @pytest.mark.asyncio
    async def test_all_identifiers_resolve_same_instance(self, cache):
        """测试所有标识解析到同一个实例"""
        by_id = await cache.resolve_workspace(42)
        assert await cache.resolve_workspace(WS_UUID) is by_id
        assert await cache.resolve_workspace("ws42") is by_id
        assert await cache.resolve_workspace("Engineering") is by_id
        assert await cache.resolve_workspace(AllId.from_short_id("ws42")) is by_id

    @pytest.mark.asyncio
    async def test_name_lookup_after_single_fetch(self, cache, mock_workspace_api):
        """测试单对象拉取后按名称查找其他空间仍会全量拉取"""
        await cache.resolve_workspace(42)

        ws = await cache.resolve_workspace("Sales")

        assert ws.id == 43
        # 全量拉取的 42 不会重复插入
        assert len(await cache.get_all_workspaces_and_lists()) == 2

    @pytest.mark.asyncio
    async def test_concurrent_fetch_keeps_one_instance(self, cache, mock_workspace_api):
        """测试并发未命中时缓存中只保留一个实例"""

        async def slow_fetch(workspace_id):
            await asyncio.sleep(0.01)
            return WS_42

        mock_workspace_api.get_workspace.side_effect = slow_fetch

        results = await asyncio.gather(*(cache.resolve_workspace(42) for _ in range(5)))

        assert all(r is results[0] for r in results)
        assert len(cache._workspaces) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("identifier", [0, -5])
    async def test_invalid_numeric_id(self, cache, mock_workspace_api, identifier):
        """测试非正整数 ID 报校验错误且不发请求"""
        with pytest.raises(ValidationError):
            await cache.resolve_workspace(identifier)

        mock_workspace_api.get_workspace.assert_not_called()


class TestGetAllWorkspaces:
    """测试 get_all_workspaces_and_lists 方法"""

    @pytest.mark.asyncio
    async def test_fetch_once(self, cache, mock_workspace_api):
        """测试只全量拉取一次"""
        first = await cache.get_all_workspaces_and_lists()
        second = await cache.get_all_workspaces_and_lists()

        assert [w.id for w in first] == [42, 43]
        assert [w.id for w in second] == [42, 43]
        mock_workspace_api.get_all_workspaces_and_lists.assert_called_once()


class TestResolveFieldSchema:
    """测试 resolve_field_schema 方法"""

    @pytest.mark.asyncio
    async def test_fetch_and_cache(self, cache, mock_list_api):
        """测试拉取字段定义后缓存"""
        info = await cache.resolve_field_schema(42, "Tasks")
        again = await cache.resolve_field_schema("42", "l7")

        assert info.id == 7
        assert info.find_field("Title").uuid == "e1"
        assert again is info
        mock_list_api.get_list_elements.assert_called_once_with(7)

    @pytest.mark.asyncio
    async def test_scoped_by_workspace(self, cache, mock_workspace_api, mock_list_api):
        """测试同名 List 按空间区分"""
        mock_workspace_api.get_workspace.side_effect = lambda wid: (
            WS_42 if wid == "42" else WS_43
        )

        engineering = await cache.resolve_field_schema(42, "Tasks")
        sales = await cache.resolve_field_schema(43, "Tasks")

        assert engineering.id == 7
        assert sales.id == 8
        assert mock_list_api.get_list_elements.call_count == 2

    @pytest.mark.asyncio
    async def test_workspace_by_name(self, cache, mock_list_api):
        """测试按空间名称解析"""
        info = await cache.resolve_field_schema("Sales", "Tasks")
        assert info.workspace_id == 43

        await cache.resolve_field_schema("Sales", "Tasks")
        mock_list_api.get_list_elements.assert_called_once_with(8)

    @pytest.mark.asyncio
    async def test_list_not_found(self, cache, mock_list_api):
        """测试 List 不存在"""
        with pytest.raises(NotFoundError):
            await cache.resolve_field_schema(42, "Nope")

        mock_list_api.get_list_elements.assert_not_called()


class TestUsers:
    """测试用户相关方法"""

    @pytest.mark.asyncio
    async def test_get_user_id(self, cache, mock_user_api):
        """测试用户名解析"""
        assert await cache.get_user_id(42, "ALICE") == 1
        assert await cache.get_user_id(42, "Alice") == 1
        mock_user_api.get_workspace_users.assert_called_once_with(42)

    @pytest.mark.asyncio
    async def test_find_user_and_get_users(self, cache):
        """测试查找与列出用户"""
        user = await cache.find_user(42, lambda u: u.id == 1)
        assert user.display_name == "alice"
        assert len(await cache.get_users(42)) == 1

    @pytest.mark.asyncio
    async def test_reload_users(self, cache, mock_user_api):
        """测试强制重载用户"""
        await cache.get_users(42)
        await cache.reload_users(42)
        assert mock_user_api.get_workspace_users.call_count == 2


class TestClearCache:
    """测试缓存管理"""

    @pytest.mark.asyncio
    async def test_clear_workspaces(self, cache, mock_workspace_api):
        """测试清空空间缓存后重新拉取"""
        await cache.resolve_workspace(42)
        cache.clear_workspaces()
        await cache.resolve_workspace(42)

        assert mock_workspace_api.get_workspace.call_count == 2

    @pytest.mark.asyncio
    async def test_field_schema_kept_after_clear_workspaces(
        self, cache, mock_workspace_api, mock_list_api
    ):
        """测试只清空空间缓存时，字段定义缓存仍然命中"""
        info = await cache.resolve_field_schema("Engineering", "Tasks")
        cache.clear_workspaces()
        again = await cache.resolve_field_schema("Engineering", "Tasks")

        assert again is info
        assert mock_workspace_api.get_all_workspaces_and_lists.call_count == 2
        mock_list_api.get_list_elements.assert_called_once_with(7)

    @pytest.mark.asyncio
    async def test_clear_cache(self, cache, mock_list_api):
        """测试清空所有缓存"""
        await cache.resolve_field_schema(42, "Tasks")
        cache.clear_cache()
        await cache.resolve_field_schema(42, "Tasks")

        assert mock_list_api.get_list_elements.call_count == 2
