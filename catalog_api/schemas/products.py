"""Pydantic schemas for the product catalog."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ProductCreate(BaseModel):
    """Create payload. ``price`` is a decimal string such as ``"29.99"``."""

    name: str | None = Field(default=None, description="Product name (required).")
    price: str | float | None = Field(default=None, description="Price with at most two decimals (required).")
    category: str | None = Field(default=None, max_length=100)
    stock: int = Field(default=0, ge=0)


class ProductUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = None
    price: str | float | None = None
    category: str | None = Field(default=None, max_length=100)
    stock: int | None = Field(default=None, ge=0)


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    category: str | None = None
    stock: int
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    current_page: int
    total_items: int
    total_pages: int
    items_per_page: int


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str
