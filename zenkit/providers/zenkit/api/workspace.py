"""
WorkspaceAPI - 空间相关原子能力层

对应 Zenkit REST 接口:
- GET /users/me/workspacesWithLists  当前用户可见的全部空间 (含 List 概要)
- GET /workspaces/:workspace_id      单个空间 (id 或 uuid)
"""

import logging
from typing import List, Union

from zenkit.core.zenkit_client import ZenkitClient
from zenkit.schemas.zenkit import Workspace

logger = logging.getLogger(__name__)


class WorkspaceAPI:
    """
    Zenkit 空间 API 封装 (Base API Layer)

    职责: 一个方法对应一个远端接口，不做缓存
    """

    def __init__(self, client: ZenkitClient):
        self.client = client

    async def get_all_workspaces_and_lists(self) -> List[Workspace]:
        """
        获取当前用户可见的所有空间及其 List

        API: GET /users/me/workspacesWithLists

        Returns:
            空间列表，每个空间的 lists 字段包含 List 概要

        Raises:
            ApiError: 非 2xx 响应
            DecodeError: 响应结构不符
        """
        logger.debug("Getting all workspaces with lists")
        workspaces = await self.client.request_json(
            "GET", "/users/me/workspacesWithLists", response_type=List[Workspace]
        )
        logger.info("Retrieved %d workspaces", len(workspaces))
        return workspaces

    async def get_workspace(self, workspace_id: Union[int, str]) -> Workspace:
        """
        获取单个空间

        API: GET /workspaces/:workspace_id

        Args:
            workspace_id: 数字 ID 或 UUID

        Returns:
            Workspace
        """
        logger.debug("Getting workspace: workspace_id=%s", workspace_id)
        workspace = await self.client.request_json(
            "GET", f"/workspaces/{workspace_id}", response_type=Workspace
        )
        logger.info(
            "Retrieved workspace %s (%d lists)", workspace.name, len(workspace.lists)
        )
        return workspace
