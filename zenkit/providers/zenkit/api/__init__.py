"""
Zenkit API 层 - 原子能力封装

每个类对应一组远端接口，只负责请求与响应解码，不做缓存。

层级依赖拓扑:
- L0: WorkspaceAPI (空间及 List 概要，无依赖)
- L1: ListAPI (依赖 list_id)
- L-User: UserAPI (用户相关，依赖 workspace_id)

使用示例:
    from zenkit.providers.zenkit.api import WorkspaceAPI, ListAPI

    async with ZenkitClient() as client:
        workspaces = await WorkspaceAPI(client).get_all_workspaces_and_lists()
        elements = await ListAPI(client).get_list_elements(workspaces[0].lists[0].id)
"""

from .workspace import WorkspaceAPI
from .list import ListAPI
from .user import UserAPI

__all__ = [
    "WorkspaceAPI",
    "ListAPI",
    "UserAPI",
]
