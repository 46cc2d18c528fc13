"""In-memory product store (per-process, non-persistent)."""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone

from catalog_api.adapters.products.base import AbstractProductStore, Product


class InMemoryProductStore(AbstractProductStore):
    """Insertion-ordered product store guarded by a lock.

    Returned products are copies, so callers cannot mutate stored state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next_id = 1
        self._products: dict[int, Product] = {}

    def create(self, *, name: str, price: float, category: str | None = None, stock: int = 0) -> Product:
        now = datetime.now(timezone.utc)
        with self._lock:
            product = Product(
                id=self._next_id,
                name=name,
                price=price,
                category=category,
                stock=stock,
                created_at=now,
                updated_at=now,
            )
            self._products[product.id] = product
            self._next_id += 1
            return replace(product)

    def get(self, product_id: int) -> Product | None:
        with self._lock:
            product = self._products.get(product_id)
            return replace(product) if product else None

    def list_page(self, *, search: str | None = None, offset: int = 0, limit: int = 10) -> tuple[list[Product], int]:
        with self._lock:
            products = list(self._products.values())

        if search:
            term = search.lower()
            products = [
                p
                for p in products
                if term in p.name.lower() or (p.category and term in p.category.lower())
            ]

        total = len(products)
        page = [replace(p) for p in products[offset:offset + limit]]
        return page, total

    def update(
        self,
        product_id: int,
        *,
        name: str | None = None,
        price: float | None = None,
        category: str | None = None,
        stock: int | None = None,
    ) -> Product | None:
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                return None
            if name is not None:
                product.name = name
            if price is not None:
                product.price = price
            if category is not None:
                product.category = category
            if stock is not None:
                product.stock = stock
            product.updated_at = datetime.now(timezone.utc)
            return replace(product)

    def delete(self, product_id: int) -> Product | None:
        with self._lock:
            return self._products.pop(product_id, None)

    def count(self) -> int:
        with self._lock:
            return len(self._products)
