"""
micropurchase.domain.models — Canonical dataclass models.

These are the single source of truth for data structures flowing through
the decision engine.  Every model is an immutable snapshot: the engine
never mutates what it is given.

Import pattern::

    from micropurchase.domain.models import Identity, AuctionState, BidDecision
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from micropurchase.domain.enums import AuctionStatus, RejectionReason, ResolutionStatus


# ---------------------------------------------------------------------------
# Identity (resolved once per request)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Identity:
    """
    The authenticated caller, whichever channel they came through.

    ``external_id`` is the GitHub user id.  ``is_admin`` is only ever set by
    ``AuthorizationGate.require_admin``; it is not persisted.
    """
    internal_id: int
    external_id: Optional[str] = None
    is_admin: bool = False


@dataclass(frozen=True)
class Resolution:
    """Outcome of one identity lookup."""
    status: ResolutionStatus
    identity: Optional[Identity] = None
    detail: str = ""

    @property
    def found(self) -> bool:
        return self.status == ResolutionStatus.RESOLVED

    @classmethod
    def resolved(cls, identity: Identity) -> "Resolution":
        return cls(status=ResolutionStatus.RESOLVED, identity=identity)

    @classmethod
    def not_found(cls, detail: str = "") -> "Resolution":
        return cls(status=ResolutionStatus.NOT_FOUND, detail=detail)

    @classmethod
    def upstream_failure(cls, detail: str) -> "Resolution":
        return cls(status=ResolutionStatus.UPSTREAM_FAILURE, detail=detail)


# ---------------------------------------------------------------------------
# Auction state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AuctionState:
    """
    Snapshot of an auction at the moment a bid is evaluated.

    ``max_amount`` is the highest acceptable bid (the auction's start
    price).  ``None`` defers to the validator's configured default.
    """
    status: AuctionStatus
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    max_amount: Optional[int] = None

    @classmethod
    def at(
        cls,
        start: datetime,
        end: datetime,
        now: datetime,
        max_amount: Optional[int] = None,
    ) -> "AuctionState":
        """Derive the status from the bidding window as seen at ``now``."""
        if now < start:
            status = AuctionStatus.FUTURE
        elif now <= end:
            status = AuctionStatus.RUNNING
        else:
            status = AuctionStatus.CLOSED
        return cls(status=status, start=start, end=end, max_amount=max_amount)


@dataclass(frozen=True)
class ExistingBid:
    amount: int                 # whole dollars
    bidder_id: int


@dataclass(frozen=True)
class CandidateBid:
    raw_amount: Any             # straight from the transport, unvalidated
    bidder: Identity


# ---------------------------------------------------------------------------
# Bid decision
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BidDecision:
    """
    Exactly one of: accepted (``amount`` and ``bidder_id`` set) or rejected
    (``reason`` set).  Build through ``accept`` / ``reject``.
    """
    accepted: bool
    amount: Optional[int] = None
    bidder_id: Optional[int] = None
    reason: Optional[RejectionReason] = None

    @classmethod
    def accept(cls, amount: int, bidder_id: int) -> "BidDecision":
        return cls(accepted=True, amount=amount, bidder_id=bidder_id)

    @classmethod
    def reject(cls, reason: RejectionReason) -> "BidDecision":
        return cls(accepted=False, reason=reason)

    @property
    def message(self) -> str:
        return self.reason.message if self.reason is not None else ""
