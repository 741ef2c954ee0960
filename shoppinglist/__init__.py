"""Local persistent store for shopping-list items."""

__version__ = "0.1.0"
