"""Product store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass
class Product:
    id: int
    name: str
    price: float
    category: str | None
    stock: int
    created_at: datetime
    updated_at: datetime


class AbstractProductStore(ABC):
    """Interface for product persistence."""

    @abstractmethod
    def create(self, *, name: str, price: float, category: str | None = None, stock: int = 0) -> Product:
        raise NotImplementedError

    @abstractmethod
    def get(self, product_id: int) -> Product | None:
        raise NotImplementedError

    @abstractmethod
    def list_page(self, *, search: str | None = None, offset: int = 0, limit: int = 10) -> tuple[list[Product], int]:
        """Return one page of products and the total number of matches.

        ``search`` matches case-insensitively against name and category.
        """
        raise NotImplementedError

    @abstractmethod
    def update(
        self,
        product_id: int,
        *,
        name: str | None = None,
        price: float | None = None,
        category: str | None = None,
        stock: int | None = None,
    ) -> Product | None:
        """Apply the provided (non-None) fields; None when the product is missing."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, product_id: int) -> Product | None:
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError
