"""
UserRoster - 单个空间的用户缓存

懒加载一次，之后所有查找都在内存中完成；reload 时整体替换。
"""

import asyncio
import logging
from typing import Callable, Optional, Tuple

from zenkit.core.cache import RWLock
from zenkit.core.errors import NotFoundError
from zenkit.core.identifiers import user_matches
from zenkit.providers.zenkit.api import UserAPI
from zenkit.schemas.zenkit import User

logger = logging.getLogger(__name__)


class UserRoster:
    """
    空间用户名册

    - 加载由 asyncio.Lock 串行化，双重检查避免重复拉取
    - 快照是不可变 tuple，读者只会看到旧名册或完整的新名册
    - 拉取失败时保持原名册不变
    """

    def __init__(self, workspace_id: int, user_api: UserAPI):
        self.workspace_id = workspace_id
        self.user_api = user_api
        self._load_lock = asyncio.Lock()
        self._rw = RWLock()
        # None 表示从未加载；空 tuple 表示已加载但没有用户
        self._users: Optional[Tuple[User, ...]] = None

    @property
    def is_loaded(self) -> bool:
        with self._rw.read():
            return self._users is not None

    async def ensure_loaded(self, force: bool = False) -> None:
        """
        确保名册已加载

        Args:
            force: 为 True 时无论是否已加载都重新拉取

        Raises:
            ApiError / TransportError / DecodeError: 拉取失败，名册保持不变
        """
        # 第一重检查 (无锁，快速路径)
        if not force and self.is_loaded:
            return

        async with self._load_lock:
            # 第二重检查: 等锁期间其他协程可能已完成加载
            if not force and self.is_loaded:
                return

            logger.debug("Loading users for workspace %s", self.workspace_id)
            users = await self.user_api.get_workspace_users(self.workspace_id)
            snapshot = tuple(users)
            with self._rw.write():
                self._users = snapshot
            logger.info(
                "User roster loaded: workspace=%s, users=%d",
                self.workspace_id,
                len(snapshot),
            )

    def cached_users(self) -> Tuple[User, ...]:
        """当前快照，不触发加载；未加载时为空"""
        with self._rw.read():
            return self._users or ()

    async def users(self) -> Tuple[User, ...]:
        await self.ensure_loaded()
        with self._rw.read():
            return self._users or ()

    async def find(self, predicate: Callable[[User], bool]) -> Optional[User]:
        """线性扫描，返回第一个满足 predicate 的用户"""
        await self.ensure_loaded()
        with self._rw.read():
            users = self._users or ()
        for user in users:
            if predicate(user):
                return user
        return None

    async def resolve_id(self, name_or_id: str) -> int:
        """
        将用户标识解析为数字 ID

        显示名、全名、uuid 不区分大小写，数字字符串同样逐个比较。
        名册已加载时不会因为未命中而重新拉取。

        Raises:
            NotFoundError: 未找到用户
        """
        user = await self.find(lambda u: user_matches(u, name_or_id))
        if user is None:
            raise NotFoundError(
                f"未找到用户 '{name_or_id}' (workspace {self.workspace_id})",
                identifier=str(name_or_id),
            )
        logger.debug("Resolved user '%s' -> %d", name_or_id, user.id)
        return user.id
