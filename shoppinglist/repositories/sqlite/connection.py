from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ...config.settings import MEMORY_DB, get_settings
from ...domain.errors import StorageUnavailable
from .shopping_sqlite import ShoppingStoreSqlite


def open_connection(db_path: str | Path) -> sqlite3.Connection:
    """Open a SQLite connection usable from worker threads.

    ``":memory:"`` yields a volatile database private to the connection.
    """
    path = str(db_path)
    try:
        if path != MEMORY_DB:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(path, check_same_thread=False)
    except (OSError, sqlite3.Error) as exc:
        raise StorageUnavailable(f"cannot open database at {path}: {exc}") from exc


@contextmanager
def open_store(db_path: Optional[str | Path] = None) -> Iterator[ShoppingStoreSqlite]:
    """Open a store for the duration of a ``with`` block.

    The store and its connection are released on every exit path. Defaults to
    the database configured in :func:`get_settings`.
    """
    path = str(db_path) if db_path is not None else get_settings().db_path
    conn = open_connection(path)
    try:
        store = ShoppingStoreSqlite(conn, db_path=path)
        try:
            yield store
        finally:
            store.close()
    finally:
        conn.close()
