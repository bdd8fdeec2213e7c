"""
ListAPI - List 与条目 (Entry) 原子能力层

对应 Zenkit REST 接口:
- GET    /lists/:list_id/elements                      字段定义
- GET    /lists/:list_id/entries/:entry_id             单个条目 (id 或 uuid)
- POST   /lists/:list_id/entries/filter                条目分页查询
- POST   /lists/:list_id/entries/filter/list           视图查询 (带计数)
- POST   /lists/:list_id/entries                       创建条目
- PUT    /lists/:list_id/entries/:entry_id             更新条目
- DELETE /lists/:list_id/deprecated-entries/:entry_id  删除条目 (移入回收站)
- PUT    /lists/:list_id/entries/:entry_id/checklists  替换清单
"""

import logging
from typing import Any, Dict, List, Optional, Union

from zenkit.core.zenkit_client import ZenkitClient
from zenkit.schemas.zenkit import (
    Checklist,
    DeleteListEntryResponse,
    Element,
    Entry,
    GetEntriesRequest,
    GetEntriesViewRequest,
    GetEntriesViewResponse,
    OrderBy,
    SortDirection,
)

logger = logging.getLogger(__name__)

EntryRef = Union[int, str]


class ListAPI:
    """
    Zenkit List API 封装 (Base API Layer)

    依赖: list_id 来自 WorkspaceAPI 返回的 List 概要
    """

    def __init__(self, client: ZenkitClient):
        self.client = client

    async def get_list_elements(self, list_id: int) -> List[Element]:
        """
        获取 List 的字段定义

        API: GET /lists/:list_id/elements

        Args:
            list_id: List 数字 ID

        Returns:
            字段 (Element) 列表，保持服务端顺序
        """
        logger.debug("Getting list elements: list_id=%s", list_id)
        elements = await self.client.request_json(
            "GET", f"/lists/{list_id}/elements", response_type=List[Element]
        )
        logger.info("Retrieved %d elements for list %s", len(elements), list_id)
        return elements

    async def get_entry(self, list_id: int, entry_id: EntryRef) -> Entry:
        """
        获取单个条目

        API: GET /lists/:list_id/entries/:entry_id

        Args:
            list_id: List 数字 ID
            entry_id: 条目数字 ID 或 UUID
        """
        logger.debug("Getting entry: list_id=%s, entry_id=%s", list_id, entry_id)
        return await self.client.request_json(
            "GET", f"/lists/{list_id}/entries/{entry_id}", response_type=Entry
        )

    async def get_list_entries(
        self,
        list_id: int,
        limit: int,
        skip: int = 0,
        filter: Optional[Dict[str, Any]] = None,
        allow_deprecated: bool = False,
        order_by: Optional[List[OrderBy]] = None,
    ) -> List[Entry]:
        """
        分页获取条目

        API: POST /lists/:list_id/entries/filter

        Args:
            list_id: List 数字 ID
            limit: 每页数量
            skip: 跳过的条目数
            filter: 服务端过滤条件 (原样透传)
            allow_deprecated: 是否包含已删除条目
            order_by: 排序条件

        Returns:
            条目列表；超出范围时为空列表
        """
        request = GetEntriesRequest(
            filter=filter or {},
            limit=limit,
            skip=skip,
            allow_deprecated=allow_deprecated,
            order_by=order_by or [],
        )
        logger.debug(
            "Getting list entries: list_id=%s, skip=%d, limit=%d", list_id, skip, limit
        )
        entries = await self.client.request_json(
            "POST",
            f"/lists/{list_id}/entries/filter",
            json=request.model_dump(mode="json", by_alias=True),
            response_type=List[Entry],
        )
        logger.info("Retrieved %d entries from list %s", len(entries), list_id)
        return entries

    async def get_list_entries_sorted(
        self,
        list_id: int,
        field_uuid: str,
        direction: SortDirection = SortDirection.ASC,
        limit: int = 500,
        skip: int = 0,
    ) -> List[Entry]:
        """按某个字段排序获取条目，排序列为 "<field-uuid>_sort" """
        return await self.get_list_entries(
            list_id,
            limit=limit,
            skip=skip,
            order_by=[OrderBy(column=f"{field_uuid}_sort", direction=direction)],
        )

    async def get_list_entries_for_view(
        self, list_id: int, request: GetEntriesViewRequest
    ) -> GetEntriesViewResponse:
        """API: POST /lists/:list_id/entries/filter/list"""
        logger.debug("Getting list entries for view: list_id=%s", list_id)
        return await self.client.request_json(
            "POST",
            f"/lists/{list_id}/entries/filter/list",
            json=request.model_dump(mode="json", by_alias=True),
            response_type=GetEntriesViewResponse,
        )

    async def create_entry(self, list_id: int, values: Dict[str, Any]) -> Entry:
        """
        创建条目

        API: POST /lists/:list_id/entries

        Args:
            list_id: List 数字 ID
            values: 由 FieldValueCodec 生成的 "<field-uuid>_<kind>" 文档
        """
        logger.debug("Creating entry in list %s: %s", list_id, values)
        entry = await self.client.request_json(
            "POST", f"/lists/{list_id}/entries", json=values, response_type=Entry
        )
        logger.info("Created entry %s in list %s", entry.id, list_id)
        return entry

    async def update_entry(
        self, list_id: int, entry_id: EntryRef, values: Dict[str, Any]
    ) -> Entry:
        """
        更新条目 (部分更新)

        API: PUT /lists/:list_id/entries/:entry_id
        """
        logger.debug("Updating entry %s in list %s: %s", entry_id, list_id, values)
        entry = await self.client.request_json(
            "PUT",
            f"/lists/{list_id}/entries/{entry_id}",
            json=values,
            response_type=Entry,
        )
        logger.info("Updated entry %s in list %s", entry_id, list_id)
        return entry

    async def delete_entry(
        self, list_id: int, entry_id: EntryRef
    ) -> DeleteListEntryResponse:
        """API: DELETE /lists/:list_id/deprecated-entries/:entry_id"""
        logger.debug("Deleting entry %s in list %s", entry_id, list_id)
        result = await self.client.request_json(
            "DELETE",
            f"/lists/{list_id}/deprecated-entries/{entry_id}",
            response_type=DeleteListEntryResponse,
        )
        logger.info("Deleted entry %s in list %s", entry_id, list_id)
        return result

    async def update_checklists(
        self, list_id: int, entry_id: EntryRef, checklists: List[Checklist]
    ) -> Entry:
        """
        替换条目的全部清单

        API: PUT /lists/:list_id/entries/:entry_id/checklists
        """
        payload = {
            "checklists": [
                c.model_dump(mode="json", by_alias=True, exclude_none=True)
                for c in checklists
            ]
        }
        return await self.client.request_json(
            "PUT",
            f"/lists/{list_id}/entries/{entry_id}/checklists",
            json=payload,
            response_type=Entry,
        )
