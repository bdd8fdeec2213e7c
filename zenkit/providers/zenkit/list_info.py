"""
ListInfo - List 字段定义的不可变快照

由 ReferenceCache 在首次访问某个 List 时构建，之后不再修改。
"""

import logging
from typing import Optional, Tuple, Union

from zenkit.core.errors import NotFoundError, ValidationError
from zenkit.core.identifiers import matches
from zenkit.schemas.zenkit import Element, ElementCategoryId, ListSummary

logger = logging.getLogger(__name__)

# List 中的字段在界面上称为 Field
Field = Element

FieldRef = Union[Element, int, str]


class ListInfo:
    """List 概要 + 有序字段定义"""

    def __init__(self, summary: ListSummary, fields: Tuple[Element, ...]):
        self.summary = summary
        self._fields = tuple(fields)

    def __repr__(self) -> str:
        return f"ListInfo(id={self.id}, name={self.name!r}, fields={len(self._fields)})"

    @property
    def id(self) -> int:
        return self.summary.id

    @property
    def uuid(self) -> str:
        return self.summary.uuid

    @property
    def short_id(self) -> Optional[str]:
        return self.summary.short_id

    @property
    def name(self) -> str:
        return self.summary.name

    @property
    def workspace_id(self) -> int:
        return self.summary.workspace_id

    @property
    def fields(self) -> Tuple[Element, ...]:
        return self._fields

    def has_id(self, identifier: Union[int, str]) -> bool:
        return matches(self, str(identifier))

    def try_field(self, identifier: FieldRef) -> Optional[Element]:
        if isinstance(identifier, Element):
            return identifier
        candidate = str(identifier)
        for field in self._fields:
            if matches(field, candidate):
                return field
        return None

    def find_field(self, identifier: FieldRef) -> Element:
        """
        按名称、uuid、short id 或数字 ID 查找字段

        Raises:
            NotFoundError: List 中没有匹配的字段
        """
        field = self.try_field(identifier)
        if field is None:
            raise NotFoundError(
                f"未找到字段 '{identifier}' (list {self.name})", identifier=str(identifier)
            )
        return field

    def get_choice_id(self, field: FieldRef, choice: str) -> int:
        """
        Categories 字段: 按 uuid 或名称查找选项 ID

        Raises:
            ValidationError: 字段不是 Categories 类型
            NotFoundError: 没有匹配的选项
        """
        element = self.find_field(field)
        if element.element_category != ElementCategoryId.CATEGORIES:
            raise ValidationError(
                f"字段 '{element.name}' 不是 Categories 类型，无法解析选项 '{choice}'",
                field_name=element.name,
            )
        for category in element.choices:
            if choice == category.uuid or choice == category.name:
                return category.id
        raise NotFoundError(
            f"字段 '{element.name}' 中未找到选项 '{choice}'", identifier=choice
        )

    choice_id = get_choice_id

    def choice_name(self, field: FieldRef, choice_id: int) -> Optional[str]:
        element = self.find_field(field)
        for category in element.choices:
            if category.id == choice_id:
                return category.name
        return None
