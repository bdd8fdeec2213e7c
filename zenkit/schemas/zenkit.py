"""
Zenkit 线上数据结构

字段名与 Zenkit JSON 一致的通过 alias 映射到 snake_case，
未建模的字段忽略 (Entry / ElementData 例外，保留开放字段)。
"""

import re
from datetime import datetime, time, timezone
from enum import Enum, IntEnum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _f32_or_str(value: Any) -> Any:
    """
    sortOrder 在不同接口里出现过 int (1)、float (1.399964)、带引号的负数 ("-99") 三种形式
    """
    if isinstance(value, bool):
        raise ValueError(f"not a valid float value: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise ValueError(f"not a valid float value: {value!r}")
    return value


def _parse_zenkit_datetime(value: Any) -> Any:
    """
    日期可能只有日期部分 (YYYY-MM-DD)，此时视为 UTC 零点；
    带时间的值统一转换为 UTC
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if _DATE_ONLY_RE.match(text):
            dt = datetime.combine(
                datetime.strptime(text, "%Y-%m-%d").date(), time(0, 0), timezone.utc
            )
        else:
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                dt = datetime.fromisoformat(text)
            except ValueError:
                raise ValueError(f"not a valid date or datetime: {value!r}")
    else:
        return value
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _none_as_empty(value: Any) -> Any:
    return "" if value is None else value


FlexFloat = Annotated[float, BeforeValidator(_f32_or_str)]
ZenkitDateTime = Annotated[datetime, BeforeValidator(_parse_zenkit_datetime)]


class ZenkitModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ========== 枚举 ==========


class ElementCategoryId(IntEnum):
    """字段 (Element) 的值类型"""

    TEXT = 1
    NUMBER = 2
    URL = 3
    DATE = 4
    CHECKBOX = 5
    CATEGORIES = 6
    FORMULA = 7
    DATE_CREATED = 8
    DATE_UPDATED = 9
    DATE_DEPRECATED = 10
    USER_CREATED_BY = 11
    USER_UPDATED_BY = 12
    USER_DEPRECATED_BY = 13
    PERSONS = 14
    FILES = 15
    REFERENCES = 16
    HIERARCHY = 17
    SUB_ENTRIES = 18
    DEPENDENCIES = 19


class NumericType(str, Enum):
    INTEGER = "integer"
    DECIMAL = "decimal"


class TextFormat(str, Enum):
    PLAIN = "plain"
    MARKDOWN = "markdown"
    HTML = "html"


class UpdateAction(str, Enum):
    """多值字段的更新方式；NULL 用于创建条目，不输出 updateAction"""

    REPLACE = "replace"
    APPEND = "append"
    REMOVE = "remove"
    NULL = ""

    @classmethod
    def from_char(cls, c: str) -> "UpdateAction":
        """'=' -> REPLACE, '+' -> APPEND, '-' -> REMOVE，其他字符 -> NULL"""
        return {"=": cls.REPLACE, "+": cls.APPEND, "-": cls.REMOVE}.get(c, cls.NULL)


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# ========== 错误响应 ==========


class ErrorInfo(ZenkitModel):
    name: str = ""
    code: str = ""
    status_code: Optional[int] = Field(default=None, alias="statusCode")
    message: str = ""
    description: str = ""


class ErrorResult(ZenkitModel):
    error: ErrorInfo


# ========== Workspace / List ==========


class ListSummary(ZenkitModel):
    """List (集合) 概要，随 workspace 一起返回"""

    id: int
    short_id: Optional[str] = Field(default=None, alias="shortId")
    uuid: str
    name: str = ""
    item_name: Optional[str] = Field(default=None, alias="itemName")
    item_name_plural: Optional[str] = Field(default=None, alias="itemNamePlural")
    sort_order: FlexFloat = Field(default=0.0, alias="sortOrder")
    description: Optional[str] = None
    workspace_id: int = Field(alias="workspaceId")
    created_at: Optional[ZenkitDateTime] = None
    updated_at: Optional[ZenkitDateTime] = None
    deprecated_at: Optional[ZenkitDateTime] = None
    created_by: Optional[int] = None

    def __str__(self) -> str:
        return f"{self.id:<7} {self.uuid} {self.name}"


class Workspace(ZenkitModel):
    id: int
    short_id: Optional[str] = Field(default=None, alias="shortId")
    uuid: str
    name: str
    description: Optional[str] = None
    is_default: bool = Field(default=False, alias="isDefault")
    created_at: Optional[ZenkitDateTime] = None
    updated_at: Optional[ZenkitDateTime] = None
    deprecated_at: Optional[ZenkitDateTime] = None
    created_by: Optional[int] = None
    lists: List[ListSummary] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    def __str__(self) -> str:
        return f"{self.id:<7} {self.uuid} {self.name}"


# ========== Field (Element) ==========


class PredefinedCategory(ZenkitModel):
    """Categories 字段的可选项"""

    id: int
    short_id: Optional[str] = Field(default=None, alias="shortId")
    uuid: str
    name: str
    color: Optional[str] = Field(default=None, alias="colorHex")
    element_id: Optional[int] = Field(default=None, alias="elementId")
    list_id: Optional[int] = Field(default=None, alias="listId")
    sort_order: FlexFloat = Field(default=0.0, alias="sortOrder")
    deprecated_at: Optional[ZenkitDateTime] = None


class ElementData(ZenkitModel):
    """字段的类型相关配置；未建模的键 (如 format) 保留在 model_extra 中"""

    predefined_categories: Optional[List[PredefinedCategory]] = Field(
        default=None, alias="predefinedCategories"
    )
    multiple: bool = False
    child_list_uuid: Optional[str] = Field(default=None, alias="childListUUID")
    mirror_element_uuid: Optional[str] = Field(default=None, alias="mirrorElementUUID")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Element(ZenkitModel):
    """List 中的字段定义 (UI 中称为 Field)"""

    id: int
    short_id: Optional[str] = Field(default=None, alias="shortId")
    uuid: str
    name: str
    description: Optional[str] = None
    element_data: ElementData = Field(default_factory=ElementData, alias="elementData")
    is_primary: bool = Field(default=False, alias="isPrimary")
    sort_order: FlexFloat = Field(default=0.0, alias="sortOrder")
    visible: bool = True
    element_category: ElementCategoryId = Field(alias="elementcategory")
    list_id: Optional[int] = Field(default=None, alias="listId")
    created_at: Optional[ZenkitDateTime] = None
    updated_at: Optional[ZenkitDateTime] = None
    deprecated_at: Optional[ZenkitDateTime] = None

    @property
    def multiple(self) -> bool:
        return self.element_data.multiple

    @property
    def choices(self) -> List[PredefinedCategory]:
        return self.element_data.predefined_categories or []

    def numeric_type(self) -> Optional[NumericType]:
        """Number 字段的数值子类型 (elementData.format.name)，非数字字段返回 None"""
        if self.element_category != ElementCategoryId.NUMBER:
            return None
        fmt = (self.element_data.model_extra or {}).get("format")
        if isinstance(fmt, dict):
            name = fmt.get("name")
            if name in (NumericType.INTEGER.value, NumericType.DECIMAL.value):
                return NumericType(name)
        return None



# ========== User ==========


class User(ZenkitModel):
    id: int
    short_id: Optional[str] = Field(default=None, alias="shortId")
    uuid: str
    display_name: str = Field(default="", alias="displayname")
    full_name: str = Field(default="", alias="fullname")
    initials: Optional[str] = None
    user_name: Optional[str] = Field(default=None, alias="username")
    locale: Optional[str] = None
    timezone: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class Access(ZenkitModel):
    id: Optional[int] = None
    uuid: Optional[str] = None
    access_type: str = Field(alias="accessType")
    user_id: Optional[int] = Field(default=None, alias="userId")
    workspace_id: Optional[int] = Field(default=None, alias="workspaceId")
    list_id: Optional[int] = Field(default=None, alias="listId")
    organization_id: Optional[int] = Field(default=None, alias="organizationId")
    role_id: str = Field(alias="roleId")


class SharedAccesses(ZenkitModel):
    list_ids: List[int] = Field(default_factory=list, alias="listIds")
    workspace_ids: List[int] = Field(default_factory=list, alias="workspaceIds")


# ========== Entry ==========


class ChecklistItem(ZenkitModel):
    checked: bool = False
    text: str = ""


class Checklist(ZenkitModel):
    uuid: Optional[str] = None
    name: str = ""
    items: List[ChecklistItem] = Field(default_factory=list)
    should_checked_items_be_hidden: bool = Field(
        default=False, alias="shouldCheckedItemsBeHidden"
    )


class Entry(ZenkitModel):
    """
    List 中的一条记录

    固定的系统字段之外，业务字段以 "<field-uuid>_<kind>" 为键稀疏地存放，
    保留在 model_extra 中，通过 ListInfo + Item 读取。
    """

    id: int
    short_id: Optional[str] = Field(default=None, alias="shortId")
    uuid: str
    list_id: Optional[int] = Field(default=None, alias="listId")
    created_at: Optional[ZenkitDateTime] = None
    updated_at: Optional[ZenkitDateTime] = None
    deprecated_at: Optional[ZenkitDateTime] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    deprecated_by: Optional[int] = None
    created_by_displayname: Optional[str] = None
    updated_by_displayname: Optional[str] = None
    # 通过 API 创建且未指定标题时会返回 null
    display_string: Annotated[str, BeforeValidator(_none_as_empty)] = Field(
        default="", alias="displayString"
    )
    sort_order: FlexFloat = Field(default=0.0, alias="sortOrder")
    comment_count: int = 0
    checklists: List[Checklist] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @property
    def fields(self) -> Dict[str, Any]:
        return self.model_extra or {}


class DeleteListEntryDetail(ZenkitModel):
    id: int = 0
    uuid: str = ""
    short_id: str = Field(default="", alias="shortId")


class DeleteListEntryResponse(ZenkitModel):
    action: str = ""
    list_entry: Optional[DeleteListEntryDetail] = Field(default=None, alias="listEntry")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


# ========== 请求参数 ==========


class OrderBy(ZenkitModel):
    column: Optional[str] = None
    direction: SortDirection = SortDirection.ASC


class GetEntriesRequest(ZenkitModel):
    filter: Dict[str, Any] = Field(default_factory=dict)
    limit: int = 0
    skip: int = 0
    allow_deprecated: bool = Field(default=False, alias="allowDeprecated")
    order_by: List[OrderBy] = Field(default_factory=list, alias="orderBy")


class GetEntriesViewRequest(ZenkitModel):
    filter: Dict[str, Any] = Field(default_factory=dict)
    group_by_element_id: int = Field(default=0, alias="groupByElementId")
    limit: int = 0
    skip: int = 0
    allow_deprecated: bool = Field(default=False, alias="allowDeprecated")
    task_style: bool = Field(default=False, alias="taskStyle")


class FilterCountData(ZenkitModel):
    total: int = 0
    filtered_total: int = Field(default=0, alias="filteredTotal")


class GetEntriesViewResponse(ZenkitModel):
    count_data: Optional[FilterCountData] = Field(default=None, alias="countData")
    count_data_per_group: List[FilterCountData] = Field(
        default_factory=list, alias="countDataPerGroup"
    )
    list_entries: List[Entry] = Field(default_factory=list, alias="listEntries")
