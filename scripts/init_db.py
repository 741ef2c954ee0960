from __future__ import annotations

import argparse
import os
import sqlite3
import sys
from pathlib import Path


def ensure_schema(conn: sqlite3.Connection, db_path: str) -> None:
    # Programmatic schema init via the store so it always matches code
    from shoppinglist.repositories.sqlite.shopping_sqlite import ShoppingStoreSqlite

    ShoppingStoreSqlite(conn, db_path=db_path).close()


def main(argv: list[str] | None = None) -> int:
    # Ensure project root (containing 'shoppinglist') is importable
    project_root = Path(__file__).resolve().parents[1]
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    from shoppinglist.repositories.sqlite.connection import open_connection

    parser = argparse.ArgumentParser(description="Initialize SQLite database schema")
    parser.add_argument(
        "--db",
        default=os.path.join("data", "shopping.sqlite3"),
        help="Path to SQLite DB file (will be created if missing)",
    )
    args = parser.parse_args(argv)

    db_path = os.path.abspath(args.db)
    conn = open_connection(db_path)
    try:
        ensure_schema(conn, db_path)
    finally:
        conn.close()

    print(f"Initialized schema at: {db_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
