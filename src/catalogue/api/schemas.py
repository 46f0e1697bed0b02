"""Pydantic request/response schemas for the Catalogue API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from catalogue.product.product import MAX_DISCOUNT_PERCENT

GenderValue = Literal["women", "men", "unisex"]

# --- Product Request Schemas ---


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "P1",
                    "name": "Quilted Lambskin Shoulder Bag",
                    "brand": "Maison Arlette",
                    "gender": "women",
                    "categories": ["bags", "leather"],
                    "price": "4200.00",
                    "discount_percent": 10,
                    "stock": 5,
                    "description": "Quilted lambskin with an antique-gold chain strap.",
                    "images": ["https://cdn.example.com/p1-front.jpg"],
                }
            ]
        }
    }

    id: str | None = Field(None, min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    brand: str = Field(..., min_length=1, max_length=100)
    gender: GenderValue = "unisex"
    categories: list[str] = Field(default_factory=list)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    discount_percent: int = Field(0, ge=0, le=MAX_DISCOUNT_PERCENT)
    stock: int = Field(0, ge=0)
    description: str | None = None
    images: list[str] = Field(default_factory=list)


class UpdateProductRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    brand: str | None = Field(None, min_length=1, max_length=100)
    gender: GenderValue | None = None
    categories: list[str] | None = None
    price: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    discount_percent: int | None = Field(None, ge=0, le=MAX_DISCOUNT_PERCENT)
    description: str | None = None
    images: list[str] | None = None


class RestockRequest(BaseModel):
    quantity: int = Field(..., ge=1)


# --- Product Response Schemas ---


class ProductResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: str
    name: str
    brand: str
    gender: str
    categories: list[str]
    price: Decimal
    discount_percent: int
    unit_price: Decimal
    stock: int
    in_stock: bool
    description: str | None = None
    images: list[str]
    is_active: bool
    created_at: datetime


class ProductListResponse(BaseModel):
    items: list[ProductResponse]
    total: int
    limit: int
    offset: int


class FacetsResponse(BaseModel):
    model_config = {"from_attributes": True}

    brands: list[str]
    categories: list[str]
    genders: list[str]
