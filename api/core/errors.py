"""
Exception handlers shared by every feature router.

Response shapes:
- validation failures: 400 {"errors": [{"field": ..., "message": ...}, ...]}
- HTTPException: {"message": detail}
- anything unhandled: plain-text 500
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Keys are field names; "<field>.*" applies to every element of an array field.
FieldMessages = Mapping[str, str]

_REQUEST_SOURCES = {"query", "path", "body", "header", "cookie"}


def _field_path(loc: tuple[Any, ...]) -> tuple[str, str]:
    """
    Turn a pydantic error location into (display field, message key).

    ("query", "page")          -> ("page", "page")
    ("body", "imageUrls", 1)   -> ("imageUrls[1]", "imageUrls.*")
    ("body",)                  -> ("body", "body")
    """
    parts = list(loc)
    if parts and parts[0] in _REQUEST_SOURCES and len(parts) > 1:
        parts = parts[1:]

    display = ""
    key = ""
    for part in parts:
        if isinstance(part, int):
            display += f"[{part}]"
            key += ".*"
        else:
            display = f"{display}.{part}" if display else str(part)
            key = f"{key}.{part}" if key else str(part)
    return display or "body", key or "body"


def format_validation_errors(
    errors: list[dict[str, Any]],
    messages: FieldMessages,
) -> list[dict[str, str]]:
    formatted: list[dict[str, str]] = []
    for error in errors:
        field, key = _field_path(tuple(error.get("loc") or ()))
        if error.get("type") == "json_invalid":
            field, message = "body", "Request body must be valid JSON"
        else:
            message = messages.get(key) or str(error.get("msg") or "Invalid value")
        formatted.append({"field": field, "message": message})
    return formatted


def install_error_handlers(app: FastAPI, *, messages: FieldMessages) -> None:
    async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"errors": format_validation_errors(list(exc.errors()), messages)},
        )

    async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    async def unhandled_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
        logger.error(
            "unhandled_error method=%s path=%s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return PlainTextResponse("Something broke!", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
