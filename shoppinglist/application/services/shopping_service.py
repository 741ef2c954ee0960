from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional

from ...domain.entities.shopping_item import ShoppingItem
from ...infrastructure.live_value import Subscription
from ...repositories.shopping import ShoppingState, ShoppingStore, Snapshot


class AsyncShoppingStore:
    """Suspending facade over a :class:`ShoppingStore`.

    Calls run in a worker thread via :func:`asyncio.to_thread`. Writes are
    serialized by an :class:`asyncio.Lock`, so writes issued by one task are
    applied in the order they were awaited.
    """

    def __init__(self, store: ShoppingStore) -> None:
        self._store = store
        self._write_lock = asyncio.Lock()

    @property
    def store(self) -> ShoppingStore:
        return self._store

    async def insert(self, item: ShoppingItem | Mapping[str, Any]) -> int:
        async with self._write_lock:
            return await asyncio.to_thread(self._store.insert, item)

    async def delete(self, item: ShoppingItem | Mapping[str, Any]) -> None:
        async with self._write_lock:
            await asyncio.to_thread(self._store.delete, item)

    async def delete_by_id(self, item_id: int) -> None:
        async with self._write_lock:
            await asyncio.to_thread(self._store.delete_by_id, item_id)

    async def get_by_id(self, item_id: int) -> Optional[ShoppingItem]:
        return await asyncio.to_thread(self._store.get_by_id, item_id)

    async def list_all(self) -> list[ShoppingItem]:
        return await asyncio.to_thread(self._store.list_all)

    async def total_price(self) -> float:
        return await asyncio.to_thread(self._store.total_price)

    def observe_all(self) -> Subscription[Snapshot]:
        return self._store.observe_all()

    def observe_total_price(self) -> Subscription[float]:
        return self._store.observe_total_price()

    def observe_state(self) -> Subscription[ShoppingState]:
        return self._store.observe_state()
