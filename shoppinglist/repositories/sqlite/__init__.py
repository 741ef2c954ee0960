from .connection import open_connection, open_store
from .shopping_sqlite import ShoppingStoreSqlite

__all__ = [
    "ShoppingStoreSqlite",
    "open_connection",
    "open_store",
]
