from .shopping_item import ShoppingItem, total_price, validate_item

__all__ = [
    "ShoppingItem",
    "total_price",
    "validate_item",
]
