"""FastAPI endpoints for the Catalogue domain."""

from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, Query

from catalogue.api.schemas import (
    CreateProductRequest,
    FacetsResponse,
    ProductListResponse,
    ProductResponse,
    RestockRequest,
    UpdateProductRequest,
)
from catalogue.product.browsing import catalogue_facets, get_product, list_products
from catalogue.product.creation import create_product
from catalogue.product.details import update_product
from catalogue.product.lifecycle import activate_product, archive_product
from catalogue.product.stock import restock_product
from identity.api.dependencies import AdminUser, DbSession

product_router = APIRouter(prefix="/products", tags=["products"])
admin_product_router = APIRouter(prefix="/admin/products", tags=["admin"])


# --- Public endpoints ---


@product_router.get("", response_model=ProductListResponse)
def browse_products(
    db: DbSession,
    gender: Literal["women", "men", "unisex"] | None = None,
    category: str | None = None,
    brand: str | None = None,
    search: str | None = Query(None, max_length=100),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    in_stock: bool | None = None,
    sort: Literal["newest", "price_asc", "price_desc", "name"] = "newest",
    limit: int = Query(24, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> ProductListResponse:
    page = list_products(
        db,
        gender=gender,
        category=category,
        brand=brand,
        search=search,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        sort=sort,
        limit=limit,
        offset=offset,
    )
    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in page.items],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@product_router.get("/facets", response_model=FacetsResponse)
def facets(db: DbSession) -> FacetsResponse:
    return FacetsResponse.model_validate(catalogue_facets(db))


@product_router.get("/{product_id}", response_model=ProductResponse)
def product_detail(product_id: str, db: DbSession) -> ProductResponse:
    return ProductResponse.model_validate(get_product(db, product_id))


# --- Admin endpoints ---


@admin_product_router.post("", status_code=201, response_model=ProductResponse)
def add_product(body: CreateProductRequest, admin: AdminUser, db: DbSession) -> ProductResponse:
    payload = body.model_dump(exclude={"id"})
    product = create_product(db, product_id=body.id, **payload)
    db.commit()
    return ProductResponse.model_validate(product)


@admin_product_router.put("/{product_id}", response_model=ProductResponse)
def edit_product(product_id: str, body: UpdateProductRequest, admin: AdminUser, db: DbSession) -> ProductResponse:
    product = update_product(db, product_id, body.model_dump(exclude_unset=True))
    db.commit()
    return ProductResponse.model_validate(product)


@admin_product_router.delete("/{product_id}", response_model=ProductResponse)
def remove_product(product_id: str, admin: AdminUser, db: DbSession) -> ProductResponse:
    product = archive_product(db, product_id)
    db.commit()
    return ProductResponse.model_validate(product)


@admin_product_router.post("/{product_id}/activate", response_model=ProductResponse)
def reactivate_product(product_id: str, admin: AdminUser, db: DbSession) -> ProductResponse:
    product = activate_product(db, product_id)
    db.commit()
    return ProductResponse.model_validate(product)


@admin_product_router.post("/{product_id}/restock", response_model=ProductResponse)
def restock(product_id: str, body: RestockRequest, admin: AdminUser, db: DbSession) -> ProductResponse:
    product = restock_product(db, product_id, body.quantity)
    db.commit()
    return ProductResponse.model_validate(product)
