"""
Micropurchase — FastAPI application.
Main entry point for the bidding API.

Run with:
    uvicorn micropurchase.app:app --reload --host 0.0.0.0 --port 8001
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from micropurchase import config
from micropurchase.api.responses import error_response, login_redirect
from micropurchase.api.routes import register_routes
from micropurchase.channel import request_mode
from micropurchase.core.constants import (
    MSG_AUCTION_NOT_FOUND,
    MSG_UNSUPPORTED_FORMAT,
    STATUS_NOT_ACCEPTABLE,
    STATUS_UNAUTHORIZED,
)
from micropurchase.core.logging import configure_logging
from micropurchase.database import init_db
from micropurchase.domain.enums import RequestMode
from micropurchase.domain.errors import (
    AuctionNotFound, UnauthorizedError, UnsupportedFormat, UserNotFound,
)
from micropurchase.metrics import record_error

configure_logging()
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan (startup / shutdown)
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Runs once on startup, yields for the lifetime of the app."""
    logger.info("Initialising database...")
    init_db()
    logger.info("Database ready.")

    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Micropurchase",
    version="1.0.0",
    description="Reverse-auction bidding API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError):
    mode = request_mode(request)
    if mode == RequestMode.BROWSER and isinstance(exc, UserNotFound):
        return login_redirect()
    return error_response(mode, exc.message, STATUS_UNAUTHORIZED)


@app.exception_handler(AuctionNotFound)
async def auction_not_found_handler(request: Request, exc: AuctionNotFound):
    return error_response(request_mode(request), MSG_AUCTION_NOT_FOUND, 404)


@app.exception_handler(UnsupportedFormat)
async def unsupported_format_handler(request: Request, exc: UnsupportedFormat):
    return JSONResponse(status_code=STATUS_NOT_ACCEPTABLE, content={"error": MSG_UNSUPPORTED_FORMAT})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    record_error()
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "type": type(exc).__name__,
            "path": request.url.path,
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

register_routes(app)


# ---------------------------------------------------------------------------
# Development entry-point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "micropurchase.app:app",
        host="0.0.0.0",
        port=config.PORT,
        reload=True,
    )
