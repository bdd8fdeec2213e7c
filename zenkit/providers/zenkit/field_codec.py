"""
FieldValueCodec - 字段写入编码

把带类型的逻辑值 (文本、数字、人员、选项、引用) 转换为 Zenkit 的
"<field-uuid>_<kind>" 部分更新文档。

支持的组合:
- Text:       Str / Formatted                  -> <uuid>_text (+ <uuid>_textType)
- Number:     Int / Float / Str (按数值子类型转换) -> <uuid>_number
- URL:        Str                              -> <uuid>_link
- Date:       Str (原样写入)                    -> <uuid>_date
- Persons:    Str / ArrStr (按名称解析) / Int / ArrId        -> <uuid>_persons
- Categories: Str / ArrStr (按选项名解析) / Int / ArrId      -> <uuid>_categories
- References: Str / ArrStr (必须是 uuid) / Int / ArrId        -> <uuid>_references

多值字段的 action 不为 NULL 时写入 updateAction。

使用示例:
    codec = FieldValueCodec(list_info, roster)
    doc = await codec.encode([
        fset_s("Title", "Write report"),
        fup_vs("Labels", ["Urgent"], UpdateAction.APPEND),
    ])
"""

import logging
import math
import re
from typing import Any, Dict, Iterable, List, NamedTuple, Union

from zenkit.core.errors import ValidationError
from zenkit.core.identifiers import is_uuid
from zenkit.providers.zenkit.list_info import FieldRef, ListInfo
from zenkit.providers.zenkit.managers.user_roster import UserRoster
from zenkit.schemas.zenkit import (
    Element,
    ElementCategoryId,
    NumericType,
    TextFormat,
    UpdateAction,
)

logger = logging.getLogger(__name__)

UPDATE_ACTION_KEY = "updateAction"

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


# ========== 逻辑值 ==========


class Str(NamedTuple):
    value: str


class Formatted(NamedTuple):
    value: str
    format: TextFormat


class Int(NamedTuple):
    value: int


class Float(NamedTuple):
    value: float


class ArrStr(NamedTuple):
    values: List[str]


class ArrId(NamedTuple):
    values: List[int]


FieldVal = Union[Str, Formatted, Int, Float, ArrStr, ArrId]


class FieldSetVal(NamedTuple):
    field: FieldRef
    value: FieldVal
    action: UpdateAction = UpdateAction.NULL


# ========== 构造辅助 ==========
# fset_*: 创建条目 (不输出 updateAction)；fup_*: 更新条目


def fset_s(field: FieldRef, value: str) -> FieldSetVal:
    """文本，或可转换为数字/人员/选项/引用的字符串"""
    return FieldSetVal(field, Str(value), UpdateAction.NULL)


def fup_s(field: FieldRef, value: str, action: UpdateAction) -> FieldSetVal:
    return FieldSetVal(field, Str(value), action)


def fset_id(field: FieldRef, value: int) -> FieldSetVal:
    """人员 / 选项 / 引用的数字 ID"""
    return FieldSetVal(field, Int(value), UpdateAction.NULL)


def fup_id(field: FieldRef, value: int, action: UpdateAction) -> FieldSetVal:
    return FieldSetVal(field, Int(value), action)


def fset_t(field: FieldRef, value: str, fmt: TextFormat) -> FieldSetVal:
    return FieldSetVal(field, Formatted(value, fmt), UpdateAction.NULL)


def fup_t(
    field: FieldRef, value: str, fmt: TextFormat, action: UpdateAction
) -> FieldSetVal:
    return FieldSetVal(field, Formatted(value, fmt), action)


def fset_i(field: FieldRef, value: int) -> FieldSetVal:
    return FieldSetVal(field, Int(value), UpdateAction.NULL)


def fup_i(field: FieldRef, value: int, action: UpdateAction) -> FieldSetVal:
    return FieldSetVal(field, Int(value), action)


def fset_f(field: FieldRef, value: float) -> FieldSetVal:
    return FieldSetVal(field, Float(value), UpdateAction.NULL)


def fup_f(field: FieldRef, value: float, action: UpdateAction) -> FieldSetVal:
    return FieldSetVal(field, Float(value), action)


def fset_vid(field: FieldRef, values: List[int]) -> FieldSetVal:
    return FieldSetVal(field, ArrId(list(values)), UpdateAction.NULL)


def fup_vid(field: FieldRef, values: List[int], action: UpdateAction) -> FieldSetVal:
    return FieldSetVal(field, ArrId(list(values)), action)


def fset_vs(field: FieldRef, values: List[str]) -> FieldSetVal:
    return FieldSetVal(field, ArrStr(list(values)), UpdateAction.NULL)


def fup_vs(field: FieldRef, values: List[str], action: UpdateAction) -> FieldSetVal:
    return FieldSetVal(field, ArrStr(list(values)), action)


# ========== 编码 ==========


def check_uuid(value: str, field_name: str) -> None:
    if not is_uuid(value):
        raise ValidationError(
            f"Not a valid uuid '{value}' for field '{field_name}'", field_name=field_name
        )


def _finite(value: float, field_name: str) -> float:
    if math.isnan(value) or math.isinf(value):
        raise ValidationError(
            f"Float values cannot be Infinite or NaN (field {field_name})",
            field_name=field_name,
        )
    return value


class FieldValueCodec:
    """
    单个 List 的字段编码器

    Args:
        list_info: List 字段定义
        roster: List 所属空间的用户名册，用于人员名称解析
    """

    def __init__(self, list_info: ListInfo, roster: UserRoster):
        self.list_info = list_info
        self.roster = roster

    async def encode(self, values: Iterable[FieldSetVal]) -> Dict[str, Any]:
        doc: Dict[str, Any] = {}
        for field_val in values:
            await self.apply(doc, field_val.field, field_val.value, field_val.action)
        return doc

    async def apply(
        self,
        doc: Dict[str, Any],
        field_identifier: FieldRef,
        value: FieldVal,
        action: UpdateAction = UpdateAction.NULL,
    ) -> None:
        """
        把一个字段值写入 doc

        Raises:
            NotFoundError: 字段、选项或用户不存在
            ValidationError: 值类型 / 动作与字段类型不匹配、多值限制、非法 uuid、数字格式错误
        """
        field = self.list_info.find_field(field_identifier)
        kind = field.element_category
        logger.debug(
            "Encoding field %s (%s): %s action=%s", field.name, kind.name, value, action
        )

        if kind == ElementCategoryId.TEXT and self._is_scalar_action(action):
            if isinstance(value, Formatted):
                doc[f"{field.uuid}_text"] = value.value
                doc[f"{field.uuid}_textType"] = TextFormat(value.format).value
                return
            if isinstance(value, Str):
                doc[f"{field.uuid}_text"] = value.value
                return

        if kind == ElementCategoryId.NUMBER and self._is_scalar_action(action):
            if isinstance(value, Int):
                doc[f"{field.uuid}_number"] = int(value.value)
                return
            if isinstance(value, Float):
                doc[f"{field.uuid}_number"] = _finite(float(value.value), field.name)
                return
            if isinstance(value, Str):
                doc[f"{field.uuid}_number"] = self._coerce_number(field, value.value)
                return

        if kind == ElementCategoryId.URL and self._is_scalar_action(action):
            if isinstance(value, Str):
                doc[f"{field.uuid}_link"] = value.value
                return

        if kind == ElementCategoryId.DATE and self._is_scalar_action(action):
            if isinstance(value, Str):
                doc[f"{field.uuid}_date"] = value.value
                return

        if kind == ElementCategoryId.PERSONS:
            ids = await self._person_ids(field, value)
            if ids is not None:
                self._put_multi(doc, field, "persons", ids, action)
                return

        if kind == ElementCategoryId.CATEGORIES:
            ids = self._category_ids(field, value)
            if ids is not None:
                self._put_multi(doc, field, "categories", ids, action)
                return

        if kind == ElementCategoryId.REFERENCES:
            refs = self._references(field, value)
            if refs is not None:
                self._put_multi(doc, field, "references", refs, action)
                return

        raise ValidationError(
            f"Invalid value ({value!r}) or action ({action.name}) "
            f"for field {field.name} (type {kind.name})",
            field_name=field.name,
        )

    @staticmethod
    def _is_scalar_action(action: UpdateAction) -> bool:
        return action in (UpdateAction.REPLACE, UpdateAction.NULL)

    @staticmethod
    def _check_multiple(field: Element, count: int, what: str) -> None:
        if not field.multiple and count > 1:
            raise ValidationError(
                f"Field {field.name} can't accept more than one {what} "
                f"but {count} were provided",
                field_name=field.name,
            )

    @staticmethod
    def _put_multi(
        doc: Dict[str, Any],
        field: Element,
        suffix: str,
        values: List[Any],
        action: UpdateAction,
    ) -> None:
        doc[f"{field.uuid}_{suffix}"] = values
        if action != UpdateAction.NULL:
            doc[UPDATE_ACTION_KEY] = action.value

    def _coerce_number(self, field: Element, raw: str) -> Union[int, float]:
        numeric_type = field.numeric_type()
        if numeric_type == NumericType.INTEGER:
            if not _INT_RE.fullmatch(raw):
                raise ValidationError(
                    f"Invalid int value {raw} for field {field.name}",
                    field_name=field.name,
                )
            return int(raw)
        if numeric_type == NumericType.DECIMAL:
            if not _FLOAT_RE.fullmatch(raw):
                raise ValidationError(
                    f"Invalid float value {raw} for field {field.name}",
                    field_name=field.name,
                )
            return _finite(float(raw), field.name)
        raise ValidationError(
            f"Unknown numeric type at field {field.name}", field_name=field.name
        )

    async def _person_ids(self, field: Element, value: FieldVal):
        if isinstance(value, Int):
            return [int(value.value)]
        if isinstance(value, ArrId):
            self._check_multiple(field, len(value.values), "person")
            return [int(v) for v in value.values]
        if isinstance(value, Str):
            return [await self.roster.resolve_id(value.value)]
        if isinstance(value, ArrStr):
            self._check_multiple(field, len(value.values), "person")
            return [await self.roster.resolve_id(name) for name in value.values]
        return None

    def _category_ids(self, field: Element, value: FieldVal):
        if isinstance(value, Int):
            return [int(value.value)]
        if isinstance(value, ArrId):
            self._check_multiple(field, len(value.values), "category")
            return [int(v) for v in value.values]
        if isinstance(value, Str):
            return [self.list_info.get_choice_id(field, value.value)]
        if isinstance(value, ArrStr):
            self._check_multiple(field, len(value.values), "label")
            return [self.list_info.get_choice_id(field, name) for name in value.values]
        return None

    def _references(self, field: Element, value: FieldVal):
        if isinstance(value, Int):
            return [int(value.value)]
        if isinstance(value, ArrId):
            self._check_multiple(field, len(value.values), "reference")
            return [int(v) for v in value.values]
        if isinstance(value, Str):
            check_uuid(value.value, field.name)
            return [value.value]
        if isinstance(value, ArrStr):
            self._check_multiple(field, len(value.values), "reference")
            for ref in value.values:
                check_uuid(ref, field.name)
            return list(value.values)
        return None
