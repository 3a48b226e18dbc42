"""
Micropurchase — router registration.

Import and call ``register_routes(app)`` once in ``micropurchase.app``.

  POST /auctions/{auction_id}/bids          — place a bid (authenticated)
  GET  /auctions/{auction_id}/bids          — bid history (public, veiled)
  GET  /admin/auctions/{auction_id}/bids    — bid history (admin, unveiled)
  GET  /health                              — health check
"""

from __future__ import annotations

import logging
import time
from typing import Any, List, Optional
from urllib.parse import parse_qs

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import RedirectResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from micropurchase.admins import AdminRegistry
from micropurchase.api.responses import error_response, login_redirect
from micropurchase.api.schemas import (
    BidListResponse,
    BidResponse,
    ErrorResponse,
    HealthResponse,
    PlaceBidResponse,
)
from micropurchase.authorization import AuthorizationGate
from micropurchase.bid_validator import BidValidator, current_minimum
from micropurchase.bidding import place_bid
from micropurchase.channel import api_key, request_mode
from micropurchase.core.constants import (
    MSG_UNSUPPORTED_FORMAT,
    STATUS_BID_REJECTED,
    STATUS_NOT_ACCEPTABLE,
    STATUS_UNAUTHORIZED,
)
from micropurchase.core.utils import utcnow
from micropurchase.database import (
    Bid, SqlUserDirectory, existing_bids, get_auction, get_auction_bids, get_db,
)
from micropurchase.domain.enums import AuctionStatus, RequestMode
from micropurchase.domain.errors import AuctionNotFound
from micropurchase.domain.models import Identity
from micropurchase.github_client import GitHubIdentityProvider
from micropurchase.identity import IdentityResolver
from micropurchase.metrics import metrics_snapshot
from micropurchase.session import session_user_id

logger = logging.getLogger(__name__)

_START_TIME: float = time.time()


# ---------------------------------------------------------------------------
# Dependencies (overridden in tests via app.dependency_overrides)
# ---------------------------------------------------------------------------

def get_identity_provider() -> GitHubIdentityProvider:
    return GitHubIdentityProvider()


def get_admin_registry() -> AdminRegistry:
    return AdminRegistry()


def get_validator() -> BidValidator:
    return BidValidator()


def get_gate(
    db: Session = Depends(get_db),
    provider=Depends(get_identity_provider),
    admins=Depends(get_admin_registry),
) -> AuthorizationGate:
    resolver = IdentityResolver(users=SqlUserDirectory(db), provider=provider)
    return AuthorizationGate(resolver=resolver, admins=admins)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _pick_amount(data: Any) -> Any:
    if not isinstance(data, dict):
        return None
    bid = data.get("bid")
    if isinstance(bid, dict) and "amount" in bid:
        return bid["amount"]
    if "bid[amount]" in data:
        return data["bid[amount]"]
    return data.get("amount")


async def _raw_bid_amount(request: Request) -> Any:
    """Pull the raw amount out of a JSON or form-encoded body, untouched."""
    body = await request.body()
    if not body:
        return None
    content_type = request.headers.get("content-type", "").lower()
    if "json" in content_type:
        try:
            return _pick_amount(await request.json())
        except ValueError:
            return None
    form = parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True)
    return _pick_amount({k: v[-1] for k, v in form.items()})


def _to_bid_response(bid: Bid, unveil: bool) -> BidResponse:
    return BidResponse(
        id=bid.id,
        auction_id=bid.auction_id,
        amount=bid.amount,
        bidder_id=bid.bidder_id if unveil else None,
        created_at=bid.created_at,
    )


def _bid_list(db: Session, auction_id: int, viewer: Optional[Identity], unveil_all: bool) -> BidListResponse:
    auction = get_auction(db, auction_id)
    if auction is None:
        raise AuctionNotFound(auction_id)
    state = auction.state()
    bids: List[Bid] = get_auction_bids(db, auction_id)
    closed = state.status == AuctionStatus.CLOSED
    viewer_id = viewer.internal_id if viewer is not None else None
    return BidListResponse(
        auction_id=auction_id,
        status=state.status.value,
        current_minimum=current_minimum(existing_bids(bids)),
        bids=[
            _to_bid_response(b, unveil_all or closed or b.bidder_id == viewer_id)
            for b in bids
        ],
    )


# ---------------------------------------------------------------------------
# Auction bids
# ---------------------------------------------------------------------------

_ERRORS = {
    STATUS_UNAUTHORIZED: {"model": ErrorResponse},
    STATUS_NOT_ACCEPTABLE: {"model": ErrorResponse},
}

bid_router = APIRouter(tags=["bids"])


@bid_router.post(
    "/auctions/{auction_id}/bids",
    response_model=PlaceBidResponse,
    responses={**_ERRORS, STATUS_BID_REJECTED: {"model": ErrorResponse}},
)
async def create_bid(
    auction_id: int,
    request: Request,
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
    validator: BidValidator = Depends(get_validator),
):
    mode = request_mode(request)
    if mode == RequestMode.OTHER:
        return error_response(mode, MSG_UNSUPPORTED_FORMAT, STATUS_NOT_ACCEPTABLE)

    identity = await run_in_threadpool(
        gate.require_authenticated,
        mode,
        session_user_id(request),
        api_key(request),
    )
    if identity is None:
        return login_redirect()

    raw_amount = await _raw_bid_amount(request)
    decision, bid = await run_in_threadpool(
        place_bid, db, auction_id, identity, raw_amount, validator,
    )

    auction_path = f"/auctions/{auction_id}"
    if not decision.accepted:
        return error_response(mode, decision.message, STATUS_BID_REJECTED, redirect_to=auction_path)

    if mode == RequestMode.BROWSER:
        return RedirectResponse(auction_path, status_code=302)
    return PlaceBidResponse(bid=_to_bid_response(bid, unveil=True))


@bid_router.get("/auctions/{auction_id}/bids", response_model=BidListResponse, responses=_ERRORS)
async def list_bids(
    auction_id: int,
    request: Request,
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    """Bid history; bidders stay anonymous until the auction closes,
    except for the caller's own bids."""
    mode = request_mode(request)
    viewer = await run_in_threadpool(
        gate.current_identity, mode, session_user_id(request), api_key(request),
    )
    return await run_in_threadpool(_bid_list, db, auction_id, viewer, False)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.get("/auctions/{auction_id}/bids", response_model=BidListResponse, responses=_ERRORS)
async def admin_list_bids(
    auction_id: int,
    request: Request,
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    mode = request_mode(request)
    if mode == RequestMode.OTHER:
        return error_response(mode, MSG_UNSUPPORTED_FORMAT, STATUS_NOT_ACCEPTABLE)
    admin = await run_in_threadpool(
        gate.require_admin, mode, session_user_id(request), api_key(request),
    )
    logger.info("Admin %s viewed bids for auction %s", admin.internal_id, auction_id)
    return await run_in_threadpool(_bid_list, db, auction_id, admin, True)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

health_router = APIRouter(tags=["health"])


@health_router.get("/health", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    db_status = "ok"
    try:
        db.execute(text("SELECT 1"))
    except Exception as exc:
        db_status = f"error: {exc}"

    return HealthResponse(
        status="ok" if db_status == "ok" else "degraded",
        db=db_status,
        uptime_seconds=round(time.time() - _START_TIME, 1),
        timestamp=utcnow(),
        **metrics_snapshot(),
    )


def register_routes(app: FastAPI) -> None:
    app.include_router(bid_router)
    app.include_router(admin_router)
    app.include_router(health_router)

