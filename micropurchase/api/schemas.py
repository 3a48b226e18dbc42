"""
Micropurchase — API request/response schemas (Pydantic).

All JSON endpoints return these models, which gives us OpenAPI docs and a
stable contract with API clients.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Bids
# ---------------------------------------------------------------------------

class BidResponse(BaseModel):
    id: int
    auction_id: int
    amount: int
    # None while the auction is still open and the bid is someone else's.
    bidder_id: Optional[int] = None
    created_at: datetime


class PlaceBidResponse(BaseModel):
    bid: BidResponse


class BidListResponse(BaseModel):
    auction_id: int
    status: str
    current_minimum: Optional[int] = None
    bids: List[BidResponse] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ErrorResponse(BaseModel):
    error: str


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str
    version: str = "1.0.0"
    db: str = "ok"
    uptime_seconds: float = 0.0
    bids_accepted: int = 0
    bid_rejections: Dict[str, int] = Field(default_factory=dict)
    auth_failures: int = 0
    upstream_auth_failures: int = 0
    errors_last_hour: int = 0
    timestamp: datetime
