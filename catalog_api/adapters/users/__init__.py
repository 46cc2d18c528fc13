"""User directory adapters (registration and API key lookup)."""

from catalog_api.adapters.users.base import AbstractUserDirectory, UserRecord
from catalog_api.adapters.users.in_memory import InMemoryUserDirectory

__all__ = ["AbstractUserDirectory", "InMemoryUserDirectory", "UserRecord"]
