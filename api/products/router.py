"""
Products API endpoints.

Query, path and body rules are declared on the endpoint signatures; a
request that fails them is answered with 400 before the endpoint runs
(see `core.errors`).
"""

from __future__ import annotations

import asyncpg
from fastapi import APIRouter, Depends, Path, Query, status

from core import db

from . import schemas, service

router = APIRouter(prefix="/api/products")


@router.get("")
async def list_products(
    search: str | None = Query(default=None),
    sort: str | None = Query(default=None),
    category: str | None = Query(default=None),
    min_price: float | None = Query(default=None, alias="minPrice", allow_inf_nan=False),
    max_price: float | None = Query(default=None, alias="maxPrice", allow_inf_nan=False),
    page: int = Query(schemas.DEFAULT_PAGE, ge=1),
    limit: int = Query(schemas.DEFAULT_LIMIT, ge=1, le=schemas.MAX_LIMIT),
    pool: asyncpg.Pool = Depends(db.get_pool),
) -> dict:
    """
    List products with filtering, sorting and pagination.

    `sort` is one of `new`, `priceAsc`, `priceDesc`; other values sort by id.
    """
    filters = schemas.ProductFilters(
        search=search or None,
        category=category or None,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        page=page,
        limit=limit,
    )
    return await service.list_products(pool, filters)


@router.get("/{product_id}")
async def get_product(
    product_id: int = Path(..., ge=1),
    pool: asyncpg.Pool = Depends(db.get_pool),
) -> dict:
    return await service.get_product(pool, product_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: schemas.ProductCreateRequest,
    pool: asyncpg.Pool = Depends(db.get_pool),
) -> dict:
    return await service.create_product(pool, payload)
