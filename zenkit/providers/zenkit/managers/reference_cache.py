"""
ReferenceCache - 空间 / List 字段定义 / 用户的级联缓存

缓存层级:
- L1: Workspace (id / uuid / short id / name -> Workspace，附带 UserRoster)
- L2: ListInfo (workspace + list 标识 -> 字段定义快照)
- L-User: 每个 Workspace 自己的 UserRoster

锁规则: 读写锁只保护内存扫描与插入，持有期间不发起网络请求
(先取引用、释放锁、再 await)。并发未命中同一个 key 时可能重复拉取，
插入时按数字 ID 去重，缓存中每个 ID 只保留一个实例。

使用示例:
    cache = ReferenceCache(WorkspaceAPI(client), ListAPI(client), UserAPI(client))

    workspace = await cache.resolve_workspace("Marketing")
    list_info = await cache.resolve_field_schema(workspace.id, "Tasks")
    user_id = await cache.get_user_id(workspace.id, "alice")
"""

import asyncio
import logging
from typing import Callable, List, Optional, Tuple

from zenkit.core.cache import CachedCollection
from zenkit.core.errors import NotFoundError
from zenkit.core.identifiers import AllId, IdKind, Identifier, is_numeric_id, matches_id
from zenkit.providers.zenkit.api import ListAPI, UserAPI, WorkspaceAPI
from zenkit.providers.zenkit.list_info import ListInfo
from zenkit.providers.zenkit.managers.user_roster import UserRoster
from zenkit.schemas.zenkit import ListSummary, User, Workspace

logger = logging.getLogger(__name__)


class WorkspaceData:
    """
    缓存中的空间: 不可变的 Workspace + 独立加锁的 UserRoster
    """

    def __init__(self, workspace: Workspace, roster: UserRoster):
        self.workspace = workspace
        self.roster = roster

    def __repr__(self) -> str:
        return f"WorkspaceData(id={self.id}, name={self.name!r})"

    @property
    def id(self) -> int:
        return self.workspace.id

    @property
    def uuid(self) -> str:
        return self.workspace.uuid

    @property
    def short_id(self) -> Optional[str]:
        return self.workspace.short_id

    @property
    def name(self) -> str:
        return self.workspace.name

    @property
    def lists(self) -> List[ListSummary]:
        return self.workspace.lists

    def find_list(self, identifier: AllId) -> Optional[ListSummary]:
        for summary in self.workspace.lists:
            if matches_id(summary, identifier):
                return summary
        return None


class ReferenceCache:
    """
    级联缓存管理器 (Manager Layer)

    核心职责:
    1. 标识解析: 任意标识 (id / uuid / short id / name) -> 缓存对象
    2. 懒加载: 只在未命中时访问网络，按标识形态选择单对象拉取或全量拉取
    3. 解耦: 上层 (FieldValueCodec / ItemProvider) 不直接访问 API
    """

    def __init__(
        self,
        workspace_api: WorkspaceAPI,
        list_api: ListAPI,
        user_api: UserAPI,
    ):
        self.workspace_api = workspace_api
        self.list_api = list_api
        self.user_api = user_api

        self._workspaces: CachedCollection[WorkspaceData] = CachedCollection("workspaces")
        self._lists: CachedCollection[ListInfo] = CachedCollection("field_schemas")

        self._all_lock = asyncio.Lock()
        self._all_loaded = False

    def _wrap(self, workspace: Workspace) -> WorkspaceData:
        return WorkspaceData(workspace, UserRoster(workspace.id, self.user_api))

    def _insert_workspace(self, workspace: Workspace) -> WorkspaceData:
        return self._workspaces.add(
            self._wrap(workspace), same=lambda w: w.id == workspace.id
        )

    def _insert_all(self, workspaces: List[Workspace]) -> None:
        added = self._workspaces.extend(
            (self._wrap(w) for w in workspaces), key=lambda w: w.id
        )
        logger.info(
            "Workspace cache populated: fetched=%d, new=%d", len(workspaces), added
        )

    # ========== L1: Workspace ==========

    async def get_all_workspaces_and_lists(self) -> Tuple[WorkspaceData, ...]:
        """
        全量拉取一次所有空间，之后直接返回缓存

        Returns:
            缓存中的全部空间 (包括之前单独拉取的)
        """
        if self._all_loaded:
            return self._workspaces.snapshot()

        async with self._all_lock:
            if not self._all_loaded:
                workspaces = await self.workspace_api.get_all_workspaces_and_lists()
                self._insert_all(workspaces)
                self._all_loaded = True
        return self._workspaces.snapshot()

    async def resolve_workspace(self, identifier: Identifier) -> WorkspaceData:
        """
        解析空间标识

        1. 扫描缓存
        2. 数字 ID 或 UUID: 单对象拉取
        3. 其他 (名称 / short id): 全量拉取后重新扫描

        Raises:
            NotFoundError: 全量拉取后仍未匹配
        """
        aid = AllId.of(identifier)
        cached = self._workspaces.find(lambda w: matches_id(w, aid))
        if cached is not None:
            return cached

        if aid.is_fetchable:
            logger.debug("Fetching workspace by id: %s", aid)
            workspace = await self.workspace_api.get_workspace(aid.value)
            return self._insert_workspace(workspace)

        logger.debug("Fetching all workspaces to resolve '%s'", aid)
        workspaces = await self.workspace_api.get_all_workspaces_and_lists()
        self._insert_all(workspaces)
        self._all_loaded = True

        found = self._workspaces.find(lambda w: matches_id(w, aid))
        if found is None:
            raise NotFoundError(f"未找到空间 '{aid}'", identifier=str(aid))
        return found

    def _cached_workspace_id(self, identifier: AllId) -> Optional[int]:
        if identifier.kind == IdKind.ID or (
            identifier.kind == IdKind.ANY and is_numeric_id(identifier.value)
        ):
            return int(identifier.value)
        cached = self._workspaces.find(lambda w: matches_id(w, identifier))
        return cached.id if cached is not None else None

    def _find_field_schema(
        self, workspace_id: int, list_aid: AllId
    ) -> Optional[ListInfo]:
        return self._lists.find(
            lambda info: info.workspace_id == workspace_id
            and matches_id(info, list_aid)
        )

    # ========== L2: ListInfo ==========

    async def resolve_field_schema(
        self, workspace: Identifier, list_identifier: Identifier
    ) -> ListInfo:
        """
        获取 List 的字段定义快照

        同一个 List 在进程生命周期内只拉取一次字段定义 (除非清空缓存)。

        Args:
            workspace: 空间标识
            list_identifier: List 标识 (在该空间内匹配)

        Raises:
            NotFoundError: 空间或 List 不存在
        """
        ws_aid = AllId.of(workspace)
        list_aid = AllId.of(list_identifier)

        workspace_id = self._cached_workspace_id(ws_aid)
        if workspace_id is not None:
            cached = self._find_field_schema(workspace_id, list_aid)
            if cached is not None:
                return cached

        ws = await self.resolve_workspace(ws_aid)
        cached = self._find_field_schema(ws.id, list_aid)
        if cached is not None:
            return cached

        summary = ws.find_list(list_aid)
        if summary is None:
            raise NotFoundError(
                f"空间 '{ws.name}' 中未找到 List '{list_aid}'", identifier=str(list_aid)
            )

        elements = await self.list_api.get_list_elements(summary.id)
        info = ListInfo(summary, tuple(elements))
        logger.info("Field schema cached: list=%s, fields=%d", info.name, len(elements))
        return self._lists.add(info, same=lambda existing: existing.id == info.id)

    # ========== L-User ==========

    async def get_users(self, workspace: Identifier) -> Tuple[User, ...]:
        ws = await self.resolve_workspace(workspace)
        return await ws.roster.users()

    async def find_user(
        self, workspace: Identifier, predicate: Callable[[User], bool]
    ) -> Optional[User]:
        ws = await self.resolve_workspace(workspace)
        return await ws.roster.find(predicate)

    async def get_user_id(self, workspace: Identifier, name: str) -> int:
        """
        用户名 / 全名 / uuid (不区分大小写) -> 用户数字 ID

        Raises:
            NotFoundError: 空间或用户不存在
        """
        ws = await self.resolve_workspace(workspace)
        return await ws.roster.resolve_id(name)

    async def reload_users(self, workspace: Identifier) -> None:
        ws = await self.resolve_workspace(workspace)
        await ws.roster.ensure_loaded(force=True)

    # ========== 缓存管理 ==========

    def clear_workspaces(self) -> None:
        self._workspaces.clear()
        self._all_loaded = False

    def clear_field_schemas(self) -> None:
        self._lists.clear()

    def clear_cache(self) -> None:
        """清空所有缓存"""
        self.clear_workspaces()
        self.clear_field_schemas()
