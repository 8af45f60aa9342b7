"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.shuk_bidding.api.router import router as bids_router
from src.shuk_breaks.api.router import router as breaks_router
from src.shuk_catalog.api.router import router as listings_router
from src.shuk_common.errors import AppError
from src.shuk_common.request_log import RequestLogMiddleware
from src.shuk_common.response import error_response, with_request_id
from src.shuk_enrichment.infrastructure.pokemontcg import PokemonTcgCardLookup
from src.shuk_identity.api.router import router as users_router
from src.shuk_marketplace.container import build_marketplace
from src.shuk_marketplace.sweeper import run_sweeper
from src.shuk_notify.api.router import router as notifications_router
from src.shuk_query.api.router import router as discovery_router
from src.shuk_wallet.api.router import router as wallet_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: build the engine and start the sweep. Shutdown: stop both."""
    card_lookup = None
    if settings.CARD_LOOKUP_ENABLED:
        card_lookup = PokemonTcgCardLookup(
            base_url=settings.POKEMONTCG_API_URL,
            api_key=settings.POKEMONTCG_API_KEY or None,
            cache_ttl_seconds=settings.CARD_CACHE_TTL_SECONDS,
        )
    app.state.marketplace = build_marketplace(settings, card_lookup=card_lookup)
    sweeper = asyncio.create_task(
        run_sweeper(app.state.marketplace, settings.SWEEP_INTERVAL_SECONDS)
    )
    yield
    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper
    if card_lookup is not None:
        await card_lookup.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = with_request_id(error_response(exc.code, exc.message), request)
    resp.data = {"reason": exc.kind.value}
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(users_router, prefix="/api/v1")
app.include_router(listings_router, prefix="/api/v1")
app.include_router(bids_router, prefix="/api/v1")
app.include_router(wallet_router, prefix="/api/v1")
app.include_router(breaks_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(discovery_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
