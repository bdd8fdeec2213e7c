"""
UserAPI - 用户相关原子能力层

对应 Zenkit REST 接口:
- GET /workspaces/:workspace_id/users       空间成员
- GET /users/me/access                      当前用户的访问权限
- GET /users/me/matching-access/:user_id    与另一用户共享的空间/List
"""

import logging
from typing import List

from zenkit.core.zenkit_client import ZenkitClient
from zenkit.schemas.zenkit import Access, SharedAccesses, User

logger = logging.getLogger(__name__)


class UserAPI:
    """Zenkit 用户 API 封装 (Base API Layer)"""

    def __init__(self, client: ZenkitClient):
        self.client = client

    async def get_workspace_users(self, workspace_id: int) -> List[User]:
        """
        获取空间下的全部用户

        API: GET /workspaces/:workspace_id/users

        Args:
            workspace_id: 空间数字 ID

        Returns:
            用户列表
        """
        logger.debug("Getting workspace users: workspace_id=%s", workspace_id)
        users = await self.client.request_json(
            "GET", f"/workspaces/{workspace_id}/users", response_type=List[User]
        )
        logger.info("Retrieved %d users for workspace %s", len(users), workspace_id)
        return users

    async def get_user_accesses(self) -> List[Access]:
        """API: GET /users/me/access"""
        accesses = await self.client.request_json(
            "GET", "/users/me/access", response_type=List[Access]
        )
        logger.info("Retrieved %d accesses", len(accesses))
        return accesses

    async def get_shared_accesses(self, user_id: int) -> SharedAccesses:
        """
        获取当前用户与指定用户共同可访问的空间和 List

        API: GET /users/me/matching-access/:user_id
        """
        logger.debug("Getting shared accesses: user_id=%s", user_id)
        return await self.client.request_json(
            "GET", f"/users/me/matching-access/{user_id}", response_type=SharedAccesses
        )
