"""
Product business logic.

Storage failures are logged here with full detail and surfaced to the
client as a generic 500 message only.
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg
from fastapi import HTTPException, status

from core import db

from . import repository, schemas

logger = logging.getLogger(__name__)

CREATED_MESSAGE = "Product created successfully"


def _to_product(row: dict, image_urls: list[str]) -> dict[str, Any]:
    return {
        "id": int(row["id"]),
        "name": str(row["name"]),
        "description": str(row["description"]),
        "price": float(row["price"]),
        "category": str(row["category"]),
        "imageUrls": list(image_urls),
    }


def _storage_error(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


async def list_products(pool: asyncpg.Pool, filters: schemas.ProductFilters) -> dict[str, Any]:
    """
    One page of products plus counts.

    `total` is the size of the whole catalog regardless of filters;
    `filteredTotal` counts only the products matching the filters and is
    the one to use for page math.
    """
    try:
        # An offset past int8 cannot be bound and is past the end of any table.
        if filters.offset > schemas.MAX_OFFSET:
            rows = []
        else:
            rows = await repository.list_products(pool, filters)
        images = await repository.list_image_urls(pool, [int(row["id"]) for row in rows])
        filtered_total = await repository.count_products(pool, filters)
        total = await repository.count_products(pool)
    except db.DB_ERRORS as exc:
        logger.exception("products_list_failed filters=%s", filters)
        raise _storage_error("Failed to fetch products") from exc

    return {
        "products": [_to_product(row, images[int(row["id"])]) for row in rows],
        "total": total,
        "filteredTotal": filtered_total,
        "page": filters.page,
        "limit": filters.limit,
    }


async def get_product(pool: asyncpg.Pool, product_id: int) -> dict[str, Any]:
    # products.id is int4; anything larger cannot exist.
    if product_id > schemas.MAX_PRODUCT_ID:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    try:
        row = await repository.get_product(pool, product_id)
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        images = await repository.list_image_urls(pool, [product_id])
    except db.DB_ERRORS as exc:
        logger.exception("product_fetch_failed product_id=%s", product_id)
        raise _storage_error("Failed to fetch product") from exc

    return _to_product(row, images[product_id])


async def create_product(pool: asyncpg.Pool, payload: schemas.ProductCreateRequest) -> dict[str, Any]:
    """
    Insert a product and its images in a single transaction, then read
    them back. Nothing is persisted if any insert fails.
    """
    try:
        async with db.transaction(pool) as conn:
            inserted = await repository.insert_product(
                conn,
                name=payload.name,
                description=payload.description,
                price=payload.price,
                category=payload.category,
            )
            product_id = int(inserted["id"])
            await repository.insert_images(conn, product_id, payload.image_urls)

            row = await repository.get_product(conn, product_id)
            images = await repository.list_image_urls(conn, [product_id])
    except db.DB_ERRORS as exc:
        logger.exception("product_create_failed name=%s image_count=%s", payload.name, len(payload.image_urls))
        raise _storage_error("Failed to create product") from exc

    if row is None:
        raise RuntimeError(f"Product {product_id} vanished after insert.")

    logger.info("product_created product_id=%s image_count=%s", product_id, len(images[product_id]))
    return {
        "message": CREATED_MESSAGE,
        "product": _to_product(row, images[product_id]),
    }
