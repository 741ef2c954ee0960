from __future__ import annotations


class ShoppingStoreError(Exception):
    """Base class for errors raised by the shopping store."""


class ValidationError(ShoppingStoreError, ValueError):
    """A malformed item was rejected before reaching storage."""


class StorageUnavailable(ShoppingStoreError):
    """The backing database cannot be opened or used."""


class SubscriptionClosed(ShoppingStoreError):
    """Raised when reading from a subscription that has been closed."""
