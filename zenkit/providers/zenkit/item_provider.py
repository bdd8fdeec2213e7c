"""
ItemProvider - 条目读写编排

基于 ReferenceCache (字段定义、用户名册) 和 ListAPI，
对外以 Item / FieldSetVal 为单位读写条目。

使用示例:
    list_info = await cache.resolve_field_schema("Marketing", "Tasks")
    item = await provider.create_item(list_info, [fset_s("Title", "Write report")])
    await provider.update_item(list_info, item.id, [fup_vs("Owner", ["alice"], UpdateAction.REPLACE)])
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from zenkit.providers.zenkit.api import ListAPI
from zenkit.providers.zenkit.field_codec import FieldSetVal, FieldValueCodec
from zenkit.providers.zenkit.item import Item
from zenkit.providers.zenkit.list_info import ListInfo
from zenkit.providers.zenkit.managers import ReferenceCache
from zenkit.schemas.zenkit import Checklist, DeleteListEntryResponse, Entry

logger = logging.getLogger(__name__)

ItemRef = Union[int, str]


class ItemProvider:
    """条目读写 (Service Layer)"""

    PAGE_SIZE = 500

    def __init__(self, cache: ReferenceCache, list_api: ListAPI):
        self.cache = cache
        self.list_api = list_api

    async def _wrap(self, entry: Entry, list_info: ListInfo) -> Item:
        ws = await self.cache.resolve_workspace(list_info.workspace_id)
        return Item(entry, list_info, ws.roster.cached_users())

    async def codec_for(self, list_info: ListInfo) -> FieldValueCodec:
        ws = await self.cache.resolve_workspace(list_info.workspace_id)
        return FieldValueCodec(list_info, ws.roster)

    async def get_item(self, list_info: ListInfo, item_id: ItemRef) -> Item:
        """
        获取单个条目

        Args:
            list_info: 条目所属 List
            item_id: 条目数字 ID 或 UUID
        """
        entry = await self.list_api.get_entry(list_info.id, item_id)
        return await self._wrap(entry, list_info)

    async def get_items(
        self, list_info: ListInfo, filter: Optional[Dict[str, Any]] = None
    ) -> List[Item]:
        """
        获取 List 中的全部条目

        每页 PAGE_SIZE 条，直到返回空页为止。
        """
        entries: List[Entry] = []
        skip = 0
        while True:
            page = await self.list_api.get_list_entries(
                list_info.id, limit=self.PAGE_SIZE, skip=skip, filter=filter
            )
            if not page:
                break
            entries.extend(page)
            skip += len(page)
        logger.info("Loaded %d items from list %s", len(entries), list_info.name)

        ws = await self.cache.resolve_workspace(list_info.workspace_id)
        users = ws.roster.cached_users()
        return [Item(entry, list_info, users) for entry in entries]

    async def create_item(
        self, list_info: ListInfo, values: Iterable[FieldSetVal]
    ) -> Item:
        """
        创建条目

        Raises:
            NotFoundError / ValidationError: 字段值无法编码，此时不会发出请求
        """
        codec = await self.codec_for(list_info)
        doc = await codec.encode(values)
        entry = await self.list_api.create_entry(list_info.id, doc)
        return await self._wrap(entry, list_info)

    async def update_item(
        self, list_info: ListInfo, item_id: ItemRef, values: Iterable[FieldSetVal]
    ) -> Item:
        codec = await self.codec_for(list_info)
        doc = await codec.encode(values)
        entry = await self.list_api.update_entry(list_info.id, item_id, doc)
        return await self._wrap(entry, list_info)

    async def delete_item(
        self, list_info: ListInfo, item_id: ItemRef
    ) -> DeleteListEntryResponse:
        return await self.list_api.delete_entry(list_info.id, item_id)

    async def update_checklists(
        self, list_info: ListInfo, item_id: ItemRef, checklists: List[Checklist]
    ) -> Item:
        entry = await self.list_api.update_checklists(list_info.id, item_id, checklists)
        return await self._wrap(entry, list_info)
