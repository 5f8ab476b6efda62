"""
Product persistence (raw SQL).

Every function takes the executor explicitly: the pool for single
statements, or a connection from `db.transaction()` for multi-statement
writes.
"""

from __future__ import annotations

from decimal import Decimal

from core import db

from . import query
from .query import to_decimal
from .schemas import ProductFilters


async def list_products(conn: db.Executor, filters: ProductFilters) -> list[dict]:
    sql, args = query.build_list_query(filters)
    return await db.fetch_all(conn, sql, *args)


async def count_products(conn: db.Executor, filters: ProductFilters | None = None) -> int:
    sql, args = query.build_count_query(filters)
    total = await db.fetch_value(conn, sql, *args)
    return int(total or 0)


async def get_product(conn: db.Executor, product_id: int) -> dict | None:
    return await db.fetch_one(
        conn,
        f"""
        SELECT {query.PRODUCT_COLUMNS}
        FROM products
        WHERE id = $1
        """,
        product_id,
    )


async def list_image_urls(conn: db.Executor, product_ids: list[int]) -> dict[int, list[str]]:
    """
    Image URLs for a set of products in one round-trip, keyed by product id.
    Products without images are present with an empty list.
    """
    grouped: dict[int, list[str]] = {int(pid): [] for pid in product_ids}
    if not grouped:
        return grouped

    rows = await db.fetch_all(
        conn,
        """
        SELECT product_id, image_url
        FROM product_images
        WHERE product_id = ANY($1::int[])
        ORDER BY product_id, id
        """,
        list(grouped),
    )
    for row in rows:
        grouped[int(row["product_id"])].append(str(row["image_url"]))
    return grouped


async def insert_product(
    conn: db.Executor,
    *,
    name: str,
    description: str,
    price: Decimal,
    category: str,
) -> dict:
    row = await db.fetch_one(
        conn,
        f"""
        INSERT INTO products (name, description, price, category)
        VALUES ($1, $2, $3, $4)
        RETURNING {query.PRODUCT_COLUMNS}
        """,
        name,
        description,
        to_decimal(price),
        category,
    )
    if row is None:
        raise RuntimeError("Failed to insert product.")
    return row


async def insert_images(conn: db.Executor, product_id: int, image_urls: list[str]) -> None:
    await db.execute_many(
        conn,
        "INSERT INTO product_images (product_id, image_url) VALUES ($1, $2)",
        [(product_id, url) for url in image_urls],
    )
