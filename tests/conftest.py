from __future__ import annotations

import logging
import sqlite3
from collections.abc import Generator, Iterator

import pytest

from shoppinglist.config.settings import get_settings
from shoppinglist.domain.entities.shopping_item import ShoppingItem
from shoppinglist.logging_config import LOG_NAME
from shoppinglist.repositories.sqlite.shopping_sqlite import ShoppingStoreSqlite


@pytest.fixture(autouse=True)
def isolated_settings(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Point logs and the default database at a temp dir for every test."""
    root = tmp_path_factory.mktemp("env")
    monkeypatch.setenv("SHOPPING_LOG_FILE", str(root / "logs" / "shopping.log"))
    monkeypatch.setenv("SHOPPING_DB_PATH", str(root / "data" / "shopping.sqlite3"))
    monkeypatch.delenv("SHOPPING_LOG_LEVEL", raising=False)
    get_settings.cache_clear()
    logger = logging.getLogger(LOG_NAME)
    yield
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    get_settings.cache_clear()


@pytest.fixture
def store() -> Iterator[ShoppingStoreSqlite]:
    # Use an in-memory DB for speed + isolation
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    repo = ShoppingStoreSqlite(conn)
    yield repo
    repo.close()
    conn.close()


@pytest.fixture
def item() -> ShoppingItem:
    return ShoppingItem(name="testItem", quantity=1, price=1.0, image_url="url", id=1)
