"""Storefront FastAPI application.

Web server for the catalogue, cart and checkout APIs. Commands are processed
synchronously within the request, under the storefront domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import os
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from storefront.catalogue.seeding import seed_catalogue
from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context, configure_logging

configure_logging()

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it.
storefront.init()

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    with storefront.domain_context():
        seed_catalogue()
    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Catalogue, cart and hosted checkout with payment reconciliation",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[os.environ.get("CORS_ORIGIN", "http://localhost:3000")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context and bind request details to the log context."""
    add_context(
        request_id=request.headers.get("x-request-id") or uuid4().hex,
        path=request.url.path,
        identity=request.headers.get("x-user-id") or "guest",
    )
    try:
        with storefront.domain_context():
            response = await call_next(request)
        return response
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api import (  # noqa: E402
    cart_router,
    checkout_router,
    health_router,
    product_router,
    register_exception_handlers,
)

app.include_router(product_router, prefix=API_PREFIX)
app.include_router(cart_router, prefix=API_PREFIX)
app.include_router(checkout_router, prefix=API_PREFIX)
app.include_router(health_router)
register_exception_handlers(app)
