"""
pytest configuration and fixtures.

Unit tests swap the SQL repository for an in-memory catalog so the HTTP
layer, validation and service logic run without PostgreSQL.
"""

from __future__ import annotations

import copy
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any

import pytest
from fastapi.testclient import TestClient

from core import db
from main import create_app
from products import repository
from products.query import SORT_ORDERS
from products.schemas import ProductFilters


class StorageDown(OSError):
    """Simulated connection failure."""


class InMemoryCatalog:
    """Stand-in for `products.repository` with the same call signatures."""

    def __init__(self) -> None:
        self.products: list[dict[str, Any]] = []
        self.images: list[dict[str, Any]] = []
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise StorageDown(f"{name} failed")

    def add(self, name: str, price: str, *, category: str = "tools", description: str = "", images=()) -> int:
        product_id = len(self.products) + 1
        self.products.append(
            {
                "id": product_id,
                "name": name,
                "description": description or f"{name} description",
                "price": Decimal(price),
                "category": category,
            }
        )
        for url in images:
            self.images.append({"id": len(self.images) + 1, "product_id": product_id, "image_url": url})
        return product_id

    def _matching(self, filters: ProductFilters | None) -> list[dict[str, Any]]:
        rows = list(self.products)
        if filters is None:
            return rows
        if filters.search:
            term = filters.search.lower()
            rows = [r for r in rows if term in r["name"].lower() or term in r["description"].lower()]
        if filters.category:
            rows = [r for r in rows if r["category"] == filters.category]
        if filters.min_price is not None:
            rows = [r for r in rows if r["price"] >= Decimal(str(filters.min_price))]
        if filters.max_price is not None:
            rows = [r for r in rows if r["price"] <= Decimal(str(filters.max_price))]
        return rows

    async def list_products(self, conn, filters: ProductFilters) -> list[dict]:
        self._check("list_products")
        rows = self._matching(filters)
        order = SORT_ORDERS.get(filters.sort or "", "id ASC")
        if order.startswith("price"):
            rows.sort(key=lambda r: r["id"])
            rows.sort(key=lambda r: r["price"], reverse=order.startswith("price DESC"))
        else:
            rows.sort(key=lambda r: r["id"], reverse=order == "id DESC")
        return [dict(r) for r in rows[filters.offset : filters.offset + filters.limit]]

    async def count_products(self, conn, filters: ProductFilters | None = None) -> int:
        self._check("count_products")
        return len(self._matching(filters))

    async def get_product(self, conn, product_id: int) -> dict | None:
        self._check("get_product")
        for row in self.products:
            if row["id"] == product_id:
                return dict(row)
        return None

    async def list_image_urls(self, conn, product_ids: list[int]) -> dict[int, list[str]]:
        self._check("list_image_urls")
        grouped: dict[int, list[str]] = {pid: [] for pid in product_ids}
        for image in sorted(self.images, key=lambda i: i["id"]):
            if image["product_id"] in grouped:
                grouped[image["product_id"]].append(image["image_url"])
        return grouped

    async def insert_product(self, conn, *, name, description, price, category) -> dict:
        self._check("insert_product")
        product_id = self.add(name, str(price), category=category, description=description)
        return dict(self.products[product_id - 1])

    async def insert_images(self, conn, product_id: int, image_urls: list[str]) -> None:
        self._check("insert_images")
        for url in image_urls:
            self.images.append({"id": len(self.images) + 1, "product_id": product_id, "image_url": url})


class FakeConnection:
    def __init__(self, catalog: InMemoryCatalog) -> None:
        self.catalog = catalog

    @asynccontextmanager
    async def transaction(self):
        products = copy.deepcopy(self.catalog.products)
        images = copy.deepcopy(self.catalog.images)
        try:
            yield
        except BaseException:
            self.catalog.products = products
            self.catalog.images = images
            raise


class FakePool:
    def __init__(self, catalog: InMemoryCatalog) -> None:
        self.catalog = catalog

    @asynccontextmanager
    async def acquire(self):
        yield FakeConnection(self.catalog)


@pytest.fixture
def catalog(monkeypatch) -> InMemoryCatalog:
    store = InMemoryCatalog()
    for name in (
        "list_products",
        "count_products",
        "get_product",
        "list_image_urls",
        "insert_product",
        "insert_images",
    ):
        monkeypatch.setattr(repository, name, getattr(store, name))
    return store


@pytest.fixture
def app_factory(catalog):
    """
    Build a fresh app (settings are read at build time) wired to the catalog.
    """

    def build():
        application = create_app()
        application.dependency_overrides[db.get_pool] = lambda: FakePool(catalog)
        return application

    return build


@pytest.fixture
def app(app_factory):
    return app_factory()


@pytest.fixture
def client(app) -> TestClient:
    # No `with`: the lifespan (real asyncpg pool) is not started.
    return TestClient(app)
