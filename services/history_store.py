"""Persistent, most-recent-first store of past analyses."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import List, Optional, Tuple

from dal.history_dal import KeyValueDAL
from models.analysis_result import AnalysisResult, HistoryItem
from models.errors import RecordNotFoundError
from utils.config import DEFAULT_HISTORY_KEY

LOGGER = logging.getLogger(__name__)


class ResultStore:
    """Own the in-memory history and its serialized copy under one storage key.

    Every `append` rewrites the whole array. Appends run one at a time so a
    second analysis finishing concurrently cannot overwrite the first's write.
    The history grows without bound.
    """

    def __init__(self, dal: KeyValueDAL, key: str = DEFAULT_HISTORY_KEY) -> None:
        self._dal = dal
        self.key = key
        self._items: List[HistoryItem] = []
        self._write_lock = asyncio.Lock()

    async def load(self) -> None:
        """Read the persisted history, starting empty on any failure."""
        try:
            raw = await self._dal.get(self.key)
            self._items = self._deserialize(raw) if raw else []
        except Exception as exc:
            LOGGER.error("Failed to load history under %r, starting empty: %s", self.key, exc)
            self._items = []
        LOGGER.info("Loaded %d history records", len(self._items))

    async def append(self, result: AnalysisResult, image_url: str) -> HistoryItem:
        """Prepend a new record built from `result` and persist the full history."""
        item = HistoryItem.from_result(result, image_url)
        async with self._write_lock:
            updated = [item, *self._items]
            await self._dal.put(self.key, self._serialize(updated))
            self._items = updated
        return item

    def list(self) -> Tuple[HistoryItem, ...]:
        return tuple(self._items)

    def get(self, record_id: str) -> HistoryItem:
        """Return the record with `record_id` or raise RecordNotFoundError."""
        found: Optional[HistoryItem] = next((i for i in self._items if i.id == record_id), None)
        if found is None:
            raise RecordNotFoundError(f"Record {record_id} not found")
        return found

    def __len__(self) -> int:
        return len(self._items)

    @staticmethod
    def _serialize(items: List[HistoryItem]) -> str:
        return json.dumps([item.to_dict() for item in items])

    @staticmethod
    def _deserialize(raw: str) -> List[HistoryItem]:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("Persisted history is not an array.")
        return [HistoryItem.from_dict(entry) for entry in data]
