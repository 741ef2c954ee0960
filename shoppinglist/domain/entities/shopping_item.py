from __future__ import annotations

from typing import Any, Iterable, Mapping

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import ValidationError

# Largest value SQLite can bind to an INTEGER column
SQLITE_MAX_INT = 2**63 - 1


class ShoppingItem(BaseModel):
    """A single entry of the shopping list.

    ``id`` left as ``None`` (or ``0``) asks the store to assign a fresh one.
    ``price`` is the unit price, so the line total is ``quantity * price``.
    """

    name: str
    quantity: int = Field(..., ge=0, le=SQLITE_MAX_INT)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    image_url: str
    id: int | None = Field(default=None, ge=0, le=SQLITE_MAX_INT)

    model_config = ConfigDict(frozen=True, revalidate_instances="always")

    @field_validator("name", "image_url")
    @classmethod
    def _check_encodable(cls, v: str) -> str:
        try:
            v.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValueError("text must be valid UTF-8") from exc
        return v

    @property
    def has_id(self) -> bool:
        return bool(self.id)

    @property
    def line_total(self) -> float:
        return self.quantity * self.price

    def with_id(self, item_id: int) -> "ShoppingItem":
        return self.model_copy(update={"id": item_id})


def validate_item(item: ShoppingItem | Mapping[str, Any]) -> ShoppingItem:
    """Return a validated :class:`ShoppingItem` or raise :class:`ValidationError`."""
    try:
        return ShoppingItem.model_validate(item)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"invalid shopping item: {exc}") from exc


def total_price(items: Iterable[ShoppingItem]) -> float:
    total = 0.0
    for item in items:
        total += item.line_total
    return total
