from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, NamedTuple, Optional, Tuple

from ..domain.entities.shopping_item import ShoppingItem
from ..infrastructure.live_value import Subscription

Snapshot = Tuple[ShoppingItem, ...]


class ShoppingState(NamedTuple):
    """Items and their total price, published together after each write."""

    items: Snapshot
    total: float


class ShoppingStore(ABC):
    """Repository interface for shopping-list items."""

    @abstractmethod
    def insert(self, item: ShoppingItem | Mapping[str, Any]) -> int:
        """Insert or replace an item and return its identifier."""

    @abstractmethod
    def delete(self, item: ShoppingItem | Mapping[str, Any]) -> None:
        """Remove the stored record equal to ``item``; no-op when absent."""

    @abstractmethod
    def delete_by_id(self, item_id: int) -> None:
        """Remove an item by identifier; no-op when absent."""

    @abstractmethod
    def get_by_id(self, item_id: int) -> Optional[ShoppingItem]:
        """Return an item by identifier if present."""

    @abstractmethod
    def list_all(self) -> list[ShoppingItem]:
        """List all items in insertion order."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored items."""

    @abstractmethod
    def total_price(self) -> float:
        """Return ``sum(quantity * price)`` over all items."""

    @abstractmethod
    def observe_all(self) -> Subscription[Snapshot]:
        """Subscribe to snapshots of all items."""

    @abstractmethod
    def observe_total_price(self) -> Subscription[float]:
        """Subscribe to the running total price."""

    @abstractmethod
    def observe_state(self) -> Subscription[ShoppingState]:
        """Subscribe to items and total price as one consistent value."""

    @abstractmethod
    def close(self) -> None:
        """Release the store and close open subscriptions."""
