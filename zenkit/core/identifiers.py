"""
标识符解析工具

Zenkit 中的 workspace / list / field / user 都可以用以下任意一种标识符引用:
- 数字 ID (正整数)
- UUID (36 位 RFC-4122 格式)
- Short ID (短字母数字串)
- 名称 (精确匹配；用户名不区分大小写)
"""

import re
import uuid as uuid_lib
from enum import Enum
from typing import Any, NamedTuple, Union

from zenkit.core.errors import ValidationError

_NUMERIC_ID_RE = re.compile(r"^[0-9]+$")
_UUID_GROUP_LENGTHS = (8, 4, 4, 4, 12)


def is_uuid(value: Any) -> bool:
    """
    判断字符串是否为 36 位 RFC-4122 UUID (8-4-4-4-12 十六进制分组)

    uuid 模块能接受不带连字符或带花括号的写法，Zenkit 不接受，
    因此先检查长度和分组。
    """
    if not isinstance(value, str) or len(value) != 36:
        return False
    groups = value.split("-")
    if tuple(len(g) for g in groups) != _UUID_GROUP_LENGTHS:
        return False
    try:
        uuid_lib.UUID(value)
    except ValueError:
        return False
    return True


def is_numeric_id(value: Any) -> bool:
    """判断字符串是否为正整数形式的 ID"""
    if not isinstance(value, str) or not _NUMERIC_ID_RE.match(value):
        return False
    return int(value) > 0


def matches(entity: Any, candidate: str) -> bool:
    """
    判断 candidate 是否是 entity 的某个标识符

    精确匹配 uuid、name (区分大小写)、short_id 或 id 的十进制字符串，不做模糊匹配。
    entity 需要有 id / uuid / short_id / name 属性。
    """
    if candidate is None:
        return False
    candidate = str(candidate)
    return (
        candidate == entity.uuid
        or candidate == entity.name
        or (entity.short_id is not None and candidate == entity.short_id)
        or candidate == str(entity.id)
    )


def user_matches(user: Any, candidate: str) -> bool:
    """
    用户版本的 matches: 显示名、全名、uuid 不区分大小写比较

    数字字符串不走快速路径，仍然逐个比较。
    """
    if candidate is None:
        return False
    lowered = str(candidate).lower()
    return (
        (user.display_name or "").lower() == lowered
        or (user.full_name or "").lower() == lowered
        or (user.uuid or "").lower() == lowered
        or (user.short_id is not None and user.short_id == candidate)
        or str(user.id) == candidate
    )


class IdKind(str, Enum):
    ID = "id"
    SHORT_ID = "short_id"
    UUID = "uuid"
    ANY = "any"


class AllId(NamedTuple):
    """
    接受多种标识符的参数类型

    使用显式的工厂方法构造，避免隐式转换带来的歧义:
        AllId.from_id(42)
        AllId.from_uuid("...")
        AllId.any("Marketing")
        AllId.of(value)  # int -> ID, str -> ANY
    """

    kind: IdKind
    value: str

    @classmethod
    def from_id(cls, value: int) -> "AllId":
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValidationError(
                f"ID must be a positive integer: {value!r}", identifier=str(value)
            )
        return cls(IdKind.ID, str(value))

    @classmethod
    def from_short_id(cls, value: str) -> "AllId":
        return cls(IdKind.SHORT_ID, value)

    @classmethod
    def from_uuid(cls, value: str) -> "AllId":
        if not is_uuid(value):
            raise ValidationError(f"Not a valid uuid: {value!r}", identifier=str(value))
        return cls(IdKind.UUID, value)

    @classmethod
    def any(cls, value: str) -> "AllId":
        return cls(IdKind.ANY, value)

    @classmethod
    def of(cls, value: Union["AllId", int, str]) -> "AllId":
        if isinstance(value, AllId):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.from_id(value)
        if isinstance(value, str):
            return cls.any(value)
        raise ValidationError(
            f"Unsupported identifier type: {type(value).__name__}",
            identifier=repr(value),
        )

    @property
    def is_fetchable(self) -> bool:
        """数字 ID 或 UUID 可以直接按单个对象拉取，名称则不行"""
        if self.kind in (IdKind.ID, IdKind.UUID):
            return True
        if self.kind == IdKind.ANY:
            return is_numeric_id(self.value) or is_uuid(self.value)
        return False

    def __str__(self) -> str:
        return self.value


Identifier = Union[AllId, int, str]


def matches_id(entity: Any, identifier: AllId) -> bool:
    """按 AllId 的类型比较；ANY 退化为 matches()"""
    if identifier.kind == IdKind.ID:
        return str(entity.id) == identifier.value
    if identifier.kind == IdKind.UUID:
        return entity.uuid == identifier.value
    if identifier.kind == IdKind.SHORT_ID:
        return entity.short_id is not None and entity.short_id == identifier.value
    return matches(entity, identifier.value)
