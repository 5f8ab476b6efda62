"""
Products API schemas (request models, filters, validation messages).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

PRICE_MAX_DIGITS = 10
PRICE_DECIMAL_PLACES = 2

# Largest values the storage columns can bind: products.id is int4, LIMIT/OFFSET are int8.
MAX_PRODUCT_ID = 2**31 - 1
MAX_OFFSET = 2**63 - 1

_http_url = TypeAdapter(HttpUrl)


def _check_image_url(value: str) -> str:
    # Validate as an absolute http(s) URL but store exactly what the client sent.
    value = value.strip()
    try:
        _http_url.validate_python(value)
    except ValidationError as exc:
        raise ValueError("invalid URL") from exc
    return value


ImageUrl = Annotated[str, AfterValidator(_check_image_url)]


class ProductCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    # Matches the NUMERIC(10, 2) column.
    price: Decimal = Field(..., ge=0, max_digits=PRICE_MAX_DIGITS, decimal_places=PRICE_DECIMAL_PLACES)
    category: str = Field(..., min_length=1)
    image_urls: list[ImageUrl] = Field(..., alias="imageUrls")


@dataclass(frozen=True)
class ProductFilters:
    """
    Validated List parameters; input to the query builder.
    """

    search: str | None = None
    category: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    sort: str | None = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# Client-facing messages for validation failures, keyed by field
# ("<field>.*" covers each element of an array).
ERROR_MESSAGES: dict[str, str] = {
    "page": "Page must be a positive integer",
    "limit": f"Limit must be between 1 and {MAX_LIMIT}",
    "minPrice": "minPrice must be a number",
    "maxPrice": "maxPrice must be a number",
    "product_id": "Product ID must be a positive integer",
    "name": "Name is required",
    "description": "Description is required",
    "price": "Price must be a non-negative number below 100000000 with at most 2 decimal places",
    "category": "Category is required",
    "imageUrls": "imageUrls must be an array",
    "imageUrls.*": "Each imageUrl must be a valid URL",
}
