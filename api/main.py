from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import db, errors, settings
from core.log import configure_logging
from core.middleware import OriginAllowListMiddleware, SecurityHeadersMiddleware
from products import router as products_router
from products import schemas as products_schemas

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize the DB pool once per process; handlers get it via db.get_pool.
    app.state.pool = await db.create_pool()
    try:
        yield
    finally:
        await db.close_pool(app.state.pool)
        app.state.pool = None


def create_app() -> FastAPI:
    app = FastAPI(title="products-api", lifespan=lifespan)

    allowed_origins = settings.cors_allowed_origins()

    # Added innermost first: security headers wrap everything, then the
    # allow-list check, then CORS response headers.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(OriginAllowListMiddleware, allowed_origins=allowed_origins)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.environment() == "production")

    errors.install_error_handlers(app, messages=products_schemas.ERROR_MESSAGES)

    app.include_router(products_router.router, tags=["products"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    uvicorn.run(app, host=settings.host(), port=settings.port())


if __name__ == "__main__":
    run()
