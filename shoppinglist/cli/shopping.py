from __future__ import annotations

import argparse
import json
import sys
from typing import Sequence

from shoppinglist.domain.entities.shopping_item import ShoppingItem
from shoppinglist.domain.errors import StorageUnavailable, ValidationError
from shoppinglist.repositories.sqlite.connection import open_store


def _format_item(item: ShoppingItem) -> str:
    return (
        f"[{item.id}] {item.name} x{item.quantity} @ {item.price:.2f}"
        f" = {item.line_total:.2f}"
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Manage the local shopping list")
    p.add_argument("--db", help="Path to SQLite DB file (default: SHOPPING_DB_PATH)")
    sub = p.add_subparsers(dest="cmd", required=True)

    pa = sub.add_parser("add", help="Add or replace an item")
    pa.add_argument("name", help="Item name")
    pa.add_argument("quantity", type=int, help="Quantity")
    pa.add_argument("price", type=float, help="Unit price")
    pa.add_argument("--image-url", default="", help="Image URL")
    pa.add_argument("--id", type=int, help="Item ID (replaces an existing item)")

    pr = sub.add_parser("remove", help="Remove an item by ID")
    pr.add_argument("id", type=int, help="Item ID")

    pl = sub.add_parser("list", help="List items")
    pl.add_argument("--json", action="store_true", help="Print items as JSON")

    sub.add_parser("total", help="Print the total price")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        with open_store(args.db) as store:
            if args.cmd == "add":
                item_id = store.insert(
                    {
                        "name": args.name,
                        "quantity": args.quantity,
                        "price": args.price,
                        "image_url": args.image_url,
                        "id": args.id,
                    }
                )
                print(f"Stored item {item_id}.")
            elif args.cmd == "remove":
                if store.get_by_id(args.id) is None:
                    print(f"No item with id {args.id}.")
                else:
                    store.delete_by_id(args.id)
                    print(f"Removed item {args.id}.")
            elif args.cmd == "list":
                items = store.list_all()
                if args.json:
                    print(json.dumps([it.model_dump() for it in items], ensure_ascii=False))
                elif not items:
                    print("Shopping list is empty.")
                else:
                    print("\n".join(_format_item(it) for it in items))
            else:
                print(f"{store.total_price():.2f}")
    except ValidationError as exc:
        print(f"Invalid item: {exc}", file=sys.stderr)
        return 2
    except StorageUnavailable as exc:
        print(f"Storage unavailable: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
