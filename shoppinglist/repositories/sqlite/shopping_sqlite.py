from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from operator import attrgetter
from typing import Any, Iterator, Mapping, Optional, Sequence

from ...domain.entities.shopping_item import ShoppingItem, total_price, validate_item
from ...domain.errors import StorageUnavailable, ValidationError
from ...infrastructure.live_value import LiveValue, Subscription
from ...logging_config import get_logger
from ..shopping import ShoppingState, ShoppingStore, Snapshot

_COLUMNS = "id, name, quantity, price, image_url"


def _row_to_item(row: Sequence[Any]) -> ShoppingItem:
    return ShoppingItem(
        id=row[0], name=row[1], quantity=row[2], price=float(row[3]), image_url=row[4]
    )


class ShoppingStoreSqlite(ShoppingStore):
    """SQLite implementation of :class:`ShoppingStore`.

    Every statement runs under one lock, and observers are notified before the
    lock is released, so notifications follow the order of the writes.

    ``observe_all`` and ``observe_total_price`` are separate streams: a reader
    on another thread may see one of them a write ahead of the other. Use
    ``observe_state`` when items and total must be read as a consistent pair.

    Example:
        >>> conn = sqlite3.connect(":memory:", check_same_thread=False)
        >>> store = ShoppingStoreSqlite(conn)
        >>> store.insert(ShoppingItem(name="milk", quantity=2, price=1.5, image_url=""))
        1
        >>> store.total_price()
        3.0
    """

    def __init__(self, conn: sqlite3.Connection, *, db_path: str = ":memory:") -> None:
        self._conn = conn
        self._db_path = db_path
        self._lock = threading.RLock()
        self._closed = False
        self._logger = get_logger()
        with self._guard("create schema"):
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS shopping_items (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    quantity INTEGER NOT NULL,
                    price REAL NOT NULL,
                    image_url TEXT NOT NULL,
                    position INTEGER NOT NULL
                )
                """
            )
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS ix_shopping_items_position ON shopping_items(position)"
            )
            self._conn.commit()
        with self._guard("load items"):
            initial = self._read_state()
        self._state: LiveValue[ShoppingState] = LiveValue(initial)

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        """Serialize access and translate SQLite failures into store errors."""
        with self._lock:
            if self._closed:
                raise StorageUnavailable(f"cannot {action}: store is closed")
            try:
                yield
            except (sqlite3.IntegrityError, OverflowError, UnicodeEncodeError) as exc:
                # values sqlite3 refuses to bind never reach the database
                raise ValidationError(f"cannot {action}: {exc}") from exc
            except sqlite3.Error as exc:
                self._logger.error(
                    "Shopping store failure",
                    extra={"action": action, "db_path": self._db_path, "error": str(exc)},
                )
                raise StorageUnavailable(f"cannot {action}: {exc}") from exc

    def _fetch_items(self) -> list[ShoppingItem]:
        cur = self._conn.execute(f"SELECT {_COLUMNS} FROM shopping_items ORDER BY position")
        return [_row_to_item(r) for r in cur.fetchall()]

    def _read_state(self) -> ShoppingState:
        snapshot = tuple(self._fetch_items())
        return ShoppingState(snapshot, total_price(snapshot))

    def insert(self, item: ShoppingItem | Mapping[str, Any]) -> int:
        valid = validate_item(item)
        with self._guard("insert item"):
            # The new state is read before commit so a failed read rolls the write back
            with self._conn:
                cur = self._conn.execute(
                    """
                    INSERT INTO shopping_items (id, name, quantity, price, image_url, position)
                    VALUES (
                        ?, ?, ?, ?, ?,
                        (SELECT COALESCE(MAX(position), 0) + 1 FROM shopping_items)
                    )
                    ON CONFLICT(id) DO UPDATE SET
                        name=excluded.name,
                        quantity=excluded.quantity,
                        price=excluded.price,
                        image_url=excluded.image_url
                    """,
                    (
                        valid.id if valid.has_id else None,
                        valid.name,
                        valid.quantity,
                        valid.price,
                        valid.image_url,
                    ),
                )
                if valid.has_id:
                    item_id = int(valid.id)  # type: ignore[arg-type]
                else:
                    rowid = cur.lastrowid
                    if rowid is None:
                        raise RuntimeError(
                            "SQLite insert failed: no lastrowid (table: shopping_items)"
                        )
                    item_id = int(rowid)
                state = self._read_state()
            self._logger.info("Shopping item stored", extra={"item_id": item_id})
            self._state.publish(state)
        return item_id

    def delete(self, item: ShoppingItem | Mapping[str, Any]) -> None:
        valid = validate_item(item)
        fields = (valid.name, valid.quantity, valid.price, valid.image_url)
        if valid.has_id:
            sql = """
                DELETE FROM shopping_items
                WHERE id = ? AND name = ? AND quantity = ? AND price = ? AND image_url = ?
            """
            params: tuple[Any, ...] = (valid.id, *fields)
        else:
            # Without an id, remove the earliest record with matching fields
            sql = """
                DELETE FROM shopping_items
                WHERE id = (
                    SELECT id FROM shopping_items
                    WHERE name = ? AND quantity = ? AND price = ? AND image_url = ?
                    ORDER BY position
                    LIMIT 1
                )
            """
            params = fields
        self._delete(sql, params, valid.id)

    def delete_by_id(self, item_id: int) -> None:
        self._delete("DELETE FROM shopping_items WHERE id = ?", (item_id,), item_id)

    def _delete(self, sql: str, params: tuple[Any, ...], item_id: Optional[int]) -> None:
        with self._guard("delete item"):
            with self._conn:
                cur = self._conn.execute(sql, params)
                state = self._read_state() if cur.rowcount > 0 else None
            if state is None:
                self._logger.debug("Shopping item not found", extra={"item_id": item_id})
                return
            self._logger.info("Shopping item deleted", extra={"item_id": item_id})
            self._state.publish(state)

    def get_by_id(self, item_id: int) -> Optional[ShoppingItem]:
        with self._guard("read item"):
            cur = self._conn.execute(
                f"SELECT {_COLUMNS} FROM shopping_items WHERE id = ?", (item_id,)
            )
            row = cur.fetchone()
        if row:
            return _row_to_item(row)
        return None

    def list_all(self) -> list[ShoppingItem]:
        with self._guard("list items"):
            return self._fetch_items()

    def count(self) -> int:
        with self._guard("count items"):
            row = self._conn.execute("SELECT COUNT(*) FROM shopping_items").fetchone()
        return int(row[0]) if row and row[0] is not None else 0

    def total_price(self) -> float:
        with self._guard("sum prices"):
            row = self._conn.execute(
                "SELECT TOTAL(quantity * price) FROM shopping_items"
            ).fetchone()
        return float(row[0]) if row else 0.0

    def observe_all(self) -> Subscription[Snapshot]:
        with self._guard("observe items"):
            return self._state.subscribe_map(attrgetter("items"))

    def observe_total_price(self) -> Subscription[float]:
        with self._guard("observe total price"):
            return self._state.subscribe_map(attrgetter("total"))

    def observe_state(self) -> Subscription[ShoppingState]:
        with self._guard("observe state"):
            return self._state.subscribe()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._state.close()
        self._logger.debug("Shopping store closed", extra={"db_path": self._db_path})
