# storefront/main.py
from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session

from storefront.app.core.logging import setup_logging
from storefront.app.core.config import settings
from storefront.app.core.database import get_engine, init_db
from storefront.app.services.catalog_service import ProductCatalogService

from storefront.app.api.routes_health import router as health_router
from storefront.app.api.routes_metrics import router as metrics_router
from storefront.app.api.routes_products import router as products_router
from storefront.app.api.routes_cart import router as cart_router
from storefront.app.api.routes_favorites import router as favorites_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if settings.seed_demo_catalog:
        with Session(get_engine()) as session:
            ProductCatalogService(session).seed_catalog()
    yield


def create_app() -> FastAPI:
    # Initialize logging early so all imports use correct handlers/levels
    setup_logging(settings.log_level, settings.log_format, sql_echo=settings.database_echo)

    app = FastAPI(
        title=settings.service_name or "Storefront",
        version=settings.version or "0.1.0",
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # --- Global JSON error handler: convert unexpected 500s to JSON so the UI can show them ---
    @app.exception_handler(Exception)
    async def _unhandled_exc_to_json(request: Request, exc: Exception):
        logger.exception("unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "detail": str(exc),
                "path": str(request.url),
                "method": request.method,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_exc_to_json(request: Request, exc: RequestValidationError):
        # NaN/Infinity parse from a JSON body but cannot be written back out
        errors = [
            {**err, "input": repr(err["input"])}
            if isinstance(err.get("input"), float) and not math.isfinite(err["input"])
            else err
            for err in exc.errors()
        ]
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins or ["*"],
        allow_credentials=True,
        allow_methods=settings.cors_allow_methods or ["*"],
        allow_headers=settings.cors_allow_headers or ["*"],
    )

    # Routes
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(products_router)
    app.include_router(cart_router)
    app.include_router(favorites_router)

    # Friendly root
    @app.get("/")
    def root():
        return {
            "service": settings.service_name or "storefront",
            "version": settings.version or "0.1.0",
            "environment": settings.environment or "dev",
            "docs": "/docs",
            "openapi": "/openapi.json",
            "tips": {
                "products": "/api/products?category=<name>&q=<text>",
                "categories": "/api/products/categories",
                "cart": "/api/cart",
                "add_to_cart": "POST /api/cart/items",
                "favorites": "/api/favorites",
                "health": "/api/health",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("storefront.main:app", host=settings.host, port=settings.port)
