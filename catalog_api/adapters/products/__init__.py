"""Product storage adapters."""

from catalog_api.adapters.products.base import AbstractProductStore, Product
from catalog_api.adapters.products.in_memory import InMemoryProductStore

__all__ = ["AbstractProductStore", "InMemoryProductStore", "Product"]
