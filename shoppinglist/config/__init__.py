"""Configuration package.

Note: settings are built lazily by :func:`shoppinglist.config.settings.get_settings`
so importing the package does not depend on the environment.
"""

__all__: list[str] = []
