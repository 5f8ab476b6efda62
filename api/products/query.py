"""
SQL builder for the product listing.

Filter values are always bound as asyncpg parameters ($1, $2, ...). The
ORDER BY clause is the only interpolated part and it comes from the fixed
SORT_ORDERS table, never from client input.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from .schemas import ProductFilters

PRODUCT_COLUMNS = "id, name, description, price, category"

DEFAULT_ORDER = "id ASC"
SORT_ORDERS: dict[str, str] = {
    "new": "id DESC",
    "priceAsc": "price ASC, id ASC",
    "priceDesc": "price DESC, id ASC",
}


def order_by(sort: str | None) -> str:
    return SORT_ORDERS.get(sort or "", DEFAULT_ORDER)


def to_decimal(value: float | Decimal) -> Decimal:
    # NUMERIC columns take Decimal; str() avoids binary float artifacts.
    return Decimal(str(value))


def escape_like(term: str) -> str:
    """
    Escape LIKE wildcards so the term matches literally (backslash is the
    default escape character in Postgres).
    """
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class _Params:
    def __init__(self) -> None:
        self.values: list[Any] = []

    def add(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


def _where(filters: ProductFilters, params: _Params) -> str:
    clauses = ["1=1"]

    if filters.search:
        term = params.add("%" + escape_like(filters.search.lower()) + "%")
        clauses.append(f"(LOWER(name) LIKE {term} OR LOWER(description) LIKE {term})")

    if filters.category:
        clauses.append(f"category = {params.add(filters.category)}")

    if filters.min_price is not None:
        clauses.append(f"price >= {params.add(to_decimal(filters.min_price))}")

    if filters.max_price is not None:
        clauses.append(f"price <= {params.add(to_decimal(filters.max_price))}")

    return " AND ".join(clauses)


def build_list_query(filters: ProductFilters) -> tuple[str, list[Any]]:
    """
    Return (sql, args) selecting one page of products.
    """
    params = _Params()
    where = _where(filters, params)
    limit = params.add(filters.limit)
    offset = params.add(filters.offset)
    sql = (
        f"SELECT {PRODUCT_COLUMNS} FROM products"
        f" WHERE {where}"
        f" ORDER BY {order_by(filters.sort)}"
        f" LIMIT {limit} OFFSET {offset}"
    )
    return sql, params.values


def build_count_query(filters: ProductFilters | None = None) -> tuple[str, list[Any]]:
    """
    Return (sql, args) counting products; unfiltered when `filters` is None.
    """
    if filters is None:
        return "SELECT COUNT(*) AS total FROM products", []
    params = _Params()
    where = _where(filters, params)
    return f"SELECT COUNT(*) AS total FROM products WHERE {where}", params.values
