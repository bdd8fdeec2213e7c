"""
Zenkit Manager 层 - 业务编排与缓存管理

核心组件:
- ReferenceCache: 级联缓存，实现 workspace / list / field 的多标识解析
- UserRoster: 单个空间的用户名册
"""

from .reference_cache import ReferenceCache, WorkspaceData
from .user_roster import UserRoster

__all__ = [
    "ReferenceCache",
    "WorkspaceData",
    "UserRoster",
]
