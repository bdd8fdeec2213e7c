"""
Item - 条目字段读取

Entry 只保存 "<field-uuid>_<kind>" 形式的稀疏字段，Item 结合 ListInfo
按字段名 / uuid / ID 读取带类型的值。

多值字段优先读取服务端生成的 "<uuid>_<kind>_sort" 对象数组；
不存在时退回到原始的 "<uuid>_<kind>" 数组 (例如刚编码、尚未回写的文档)。
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from zenkit.core.errors import MultipleValuesError
from zenkit.providers.zenkit.list_info import FieldRef, ListInfo
from zenkit.schemas.zenkit import Element, Entry, TextFormat, User

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_id(value: Any) -> Optional[int]:
    return value if _is_int(value) and value >= 0 else None


class Item:
    """
    List 中的一条记录 (带字段定义)

    Args:
        entry: 原始条目
        list_info: 条目所属 List 的字段定义
        users: 已缓存的空间用户，仅用于从原始人员 ID 数组还原显示名
    """

    def __init__(
        self, entry: Entry, list_info: ListInfo, users: Sequence[User] = ()
    ):
        self.entry = entry
        self.list_info = list_info
        self._users = tuple(users)

    def __repr__(self) -> str:
        return f"Item(id={self.id}, list={self.list_info.name!r})"

    @property
    def id(self) -> int:
        return self.entry.id

    @property
    def uuid(self) -> str:
        return self.entry.uuid

    @property
    def display_string(self) -> str:
        return self.entry.display_string

    def get_field(self, field: FieldRef) -> Element:
        return self.list_info.find_field(field)

    def _raw(self, field: FieldRef, suffix: str) -> Any:
        element = self.get_field(field)
        return self.entry.fields.get(f"{element.uuid}_{suffix}")

    # ========== 标量 ==========

    def get_text_value(self, field: FieldRef) -> Optional[str]:
        return _as_str(self._raw(field, "text"))

    def get_text_format(self, field: FieldRef) -> Optional[TextFormat]:
        raw = self._raw(field, "textType")
        try:
            return TextFormat(raw) if raw is not None else None
        except ValueError:
            logger.warning("Unknown text format '%s' in item %s", raw, self.id)
            return None

    def get_int_value(self, field: FieldRef) -> Optional[int]:
        raw = self._raw(field, "number")
        if _is_int(raw):
            return raw
        if isinstance(raw, float) and raw.is_integer():
            return int(raw)
        return None

    def get_float_value(self, field: FieldRef) -> Optional[float]:
        raw = self._raw(field, "number")
        if _is_int(raw) or isinstance(raw, float):
            return float(raw)
        return None

    def get_date_value(self, field: FieldRef) -> Optional[str]:
        return _as_str(self._raw(field, "date"))

    def get_link_value(self, field: FieldRef) -> Optional[str]:
        return _as_str(self._raw(field, "link"))

    # ========== 多值 ==========

    def _pluck_sorted(
        self,
        element: Element,
        kind: str,
        key: str,
        convert: Callable[[Any], Optional[T]],
    ) -> Optional[List[T]]:
        raw = self.entry.fields.get(f"{element.uuid}_{kind}_sort")
        if not isinstance(raw, list):
            return None
        values: List[T] = []
        skipped = 0
        for obj in raw:
            value = convert(obj.get(key)) if isinstance(obj, dict) else None
            if value is None:
                skipped += 1
                continue
            values.append(value)
        if skipped:
            logger.warning(
                "Skipped %d malformed '%s' elements in item %s", skipped, kind, self.id
            )
        return values

    def _raw_array(
        self, element: Element, kind: str, convert: Callable[[Any], Optional[T]]
    ) -> List[T]:
        raw = self.entry.fields.get(f"{element.uuid}_{kind}")
        if not isinstance(raw, list):
            return []
        return [v for v in (convert(x) for x in raw) if v is not None]

    def get_person_ids(self, field: FieldRef) -> List[int]:
        element = self.get_field(field)
        ids = self._pluck_sorted(element, "persons", "id", _as_id)
        return ids if ids is not None else self._raw_array(element, "persons", _as_id)

    def get_person_names(self, field: FieldRef) -> List[str]:
        element = self.get_field(field)
        names = self._pluck_sorted(element, "persons", "displayname", _as_str)
        if names is not None:
            return names
        by_id = {u.id: u.display_name for u in self._users}
        return [
            by_id[pid]
            for pid in self._raw_array(element, "persons", _as_id)
            if pid in by_id
        ]

    def get_references(self, field: FieldRef) -> List[str]:
        element = self.get_field(field)
        refs = self._pluck_sorted(element, "references", "uuid", _as_str)
        return (
            refs if refs is not None else self._raw_array(element, "references", _as_str)
        )

    def get_choice_ids(self, field: FieldRef) -> List[int]:
        element = self.get_field(field)
        ids = self._pluck_sorted(element, "categories", "id", _as_id)
        if ids is not None:
            return ids
        return self._raw_array(element, "categories", _as_id)

    def get_choices(self, field: FieldRef) -> List[str]:
        """选中的选项名称，未选择时为空列表"""
        element = self.get_field(field)
        names = self._pluck_sorted(element, "categories", "name", _as_str)
        if names is not None:
            return names
        by_id = {c.id: c.name for c in element.choices}
        return [
            by_id[cid]
            for cid in self._raw_array(element, "categories", _as_id)
            if cid in by_id
        ]

    def get_choice(self, field: FieldRef) -> Optional[str]:
        """
        单选字段的值，未选择时返回 None

        Raises:
            MultipleValuesError: 选中了多个值 (字段在界面中被改成了多选)
        """
        element = self.get_field(field)
        names = self.get_choices(element)
        if not names:
            return None
        if len(names) > 1:
            raise MultipleValuesError(
                "Configuration error: label field not expected to contain multiple values",
                field_name=element.name,
            )
        return names[0]
