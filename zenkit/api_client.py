"""
ApiClient - 客户端上下文

显式构造并传递: 一个 ApiClient 持有 HTTP 客户端、各 API 分组、
一个 ReferenceCache 和一个 ItemProvider。多个 ApiClient 之间互不共享状态。

init_api() / get_api() 在其上提供可选的进程级默认实例。

使用示例:
    async with ApiClient(token="...") as api:
        list_info = await api.get_list_info("Marketing", "Tasks")
        items = await api.items.get_items(list_info)
"""

import logging
import threading
from typing import Optional, Tuple

from zenkit.core.errors import LifecycleError
from zenkit.core.identifiers import Identifier
from zenkit.core.zenkit_client import ZenkitClient
from zenkit.providers.zenkit.api import ListAPI, UserAPI, WorkspaceAPI
from zenkit.providers.zenkit.item_provider import ItemProvider
from zenkit.providers.zenkit.list_info import ListInfo
from zenkit.providers.zenkit.managers import ReferenceCache, WorkspaceData

logger = logging.getLogger(__name__)

_default_api: Optional["ApiClient"] = None
_default_api_lock = threading.Lock()


class ApiClient:
    def __init__(
        self,
        token: Optional[str] = None,
        endpoint: Optional[str] = None,
        client: Optional[ZenkitClient] = None,
    ):
        self.client = client or ZenkitClient(token=token, base_url=endpoint)
        self.workspace_api = WorkspaceAPI(self.client)
        self.list_api = ListAPI(self.client)
        self.user_api = UserAPI(self.client)
        self.cache = ReferenceCache(self.workspace_api, self.list_api, self.user_api)
        self.items = ItemProvider(self.cache, self.list_api)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def get_workspace(self, workspace: Identifier) -> WorkspaceData:
        return await self.cache.resolve_workspace(workspace)

    async def get_all_workspaces_and_lists(self) -> Tuple[WorkspaceData, ...]:
        return await self.cache.get_all_workspaces_and_lists()

    async def get_list_info(
        self, workspace: Identifier, list_identifier: Identifier
    ) -> ListInfo:
        return await self.cache.resolve_field_schema(workspace, list_identifier)

    async def get_user_id(self, workspace: Identifier, name: str) -> int:
        return await self.cache.get_user_id(workspace, name)

    async def close(self) -> None:
        await self.client.close()


def init_api(
    token: Optional[str] = None, endpoint: Optional[str] = None
) -> ApiClient:
    """
    创建进程级默认 ApiClient

    Raises:
        LifecycleError: 已经初始化过
    """
    global _default_api

    with _default_api_lock:
        if _default_api is not None:
            raise LifecycleError("init_api() 只能调用一次")
        logger.debug("Creating default ApiClient")
        _default_api = ApiClient(token=token, endpoint=endpoint)
    return _default_api


def get_api() -> ApiClient:
    """
    获取进程级默认 ApiClient

    Raises:
        LifecycleError: 尚未调用 init_api()
    """
    api = _default_api
    if api is None:
        raise LifecycleError("ApiClient 尚未初始化，请先调用 init_api()")
    return api


def reset_api() -> None:
    """丢弃默认实例（主要用于测试），不会关闭连接"""
    global _default_api

    with _default_api_lock:
        _default_api = None
