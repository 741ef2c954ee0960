"""Repository interfaces and implementations.

This package defines the abstract :class:`~shoppinglist.repositories.shopping.ShoppingStore`
interface and concrete implementations, such as the SQLite adapter under
:mod:`shoppinglist.repositories.sqlite`.
"""
