"""FastAPI application entry point for the Crônicas character service."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from realm.errors import InsufficientFundsError, RealmError, TransientStoreError
from server.auth import init_identity
from server.config import settings
from server.shop import seed_shop_catalog
from server.store import close_store, get_store, init_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Crônicas server")
    store = await init_store(settings.db_path)
    init_identity(store)
    if settings.seed_shop_catalog:
        await seed_shop_catalog()
    logger.info("Server ready (masters configured: %d)", len(settings.master_emails))
    yield
    logger.info("Shutting down server")
    await close_store()
    logger.info("Server stopped")


app = FastAPI(
    title="Crônicas",
    description="RPG character management: profiles, shop, missions, teams and rankings",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RealmError)
async def realm_exception_handler(request: Request, exc: RealmError):
    content: dict = {"detail": str(exc)}
    if isinstance(exc, InsufficientFundsError):
        content["shortfall"] = exc.shortfall
    if isinstance(exc, TransientStoreError):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        loc = " → ".join(str(l) for l in error["loc"])
        errors.append({"field": loc, "message": error["msg"]})
    return JSONResponse(status_code=422, content={"detail": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    start = time.monotonic()
    response = await call_next(request)
    duration_ms = (time.monotonic() - start) * 1000
    logger.info(
        "%s %s → %d (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)

# Include routes
from server.routes.auth import router as auth_router  # noqa: E402
from server.routes.characters import router as characters_router  # noqa: E402
from server.routes.missions import router as missions_router  # noqa: E402
from server.routes.profiles import router as profiles_router  # noqa: E402
from server.routes.ranking import router as ranking_router  # noqa: E402
from server.routes.recruitment import router as recruitment_router  # noqa: E402
from server.routes.shop import router as shop_router  # noqa: E402
from server.routes.teams import router as teams_router  # noqa: E402

app.include_router(auth_router, tags=["auth"])
app.include_router(profiles_router, tags=["profiles"])
app.include_router(characters_router, tags=["characters"])
app.include_router(shop_router, tags=["shop"])
app.include_router(recruitment_router, tags=["agents"])
app.include_router(missions_router, tags=["missions"])
app.include_router(teams_router, tags=["teams"])
app.include_router(ranking_router, tags=["ranking"])


@app.get("/health", tags=["ops"])
async def health_check():
    """Health check endpoint for load balancer probes."""
    try:
        store = await get_store()
        await store.execute("SELECT 1")
        return {"status": "ok", "version": app.version}
    except (RuntimeError, TransientStoreError):
        return JSONResponse(status_code=503, content={"status": "unavailable"})
