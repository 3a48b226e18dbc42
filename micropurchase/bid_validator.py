"""
Bid acceptance rules for descending-price (reverse) auctions.

A candidate bid is run through a fixed chain of rules; the first rule that
fails decides the rejection reason:

  1. availability     auction must be running
  2. eligibility      bidder must hold a valid SAM.gov registration
  3. range            amount must parse as a number in (0, max_amount]
  4. whole_dollar     amount must have no cents component
  5. lowest           amount must undercut every existing bid

The validator is pure: it reads snapshots and returns a ``BidDecision``.
Persisting an accepted bid is ``micropurchase.bidding``'s job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional, Sequence, Tuple

from micropurchase import config
from micropurchase.core.constants import MIN_BID_EXCLUSIVE
from micropurchase.core.utils import parse_amount, whole_amount
from micropurchase.domain.enums import AuctionStatus, RejectionReason
from micropurchase.domain.models import AuctionState, BidDecision, CandidateBid, ExistingBid

logger = logging.getLogger(__name__)


@dataclass
class _Evaluation:
    auction: AuctionState
    existing_bids: Sequence[ExistingBid]
    candidate: CandidateBid
    eligible: bool
    max_amount: int
    value: Optional[Decimal] = None
    amount: Optional[int] = None


def _check_availability(ev: _Evaluation) -> Optional[RejectionReason]:
    if ev.auction.status != AuctionStatus.RUNNING:
        return RejectionReason.AUCTION_NOT_AVAILABLE
    return None


def _check_eligibility(ev: _Evaluation) -> Optional[RejectionReason]:
    if ev.eligible is not True:
        return RejectionReason.BIDDER_INELIGIBLE
    return None


def _check_range(ev: _Evaluation) -> Optional[RejectionReason]:
    value = parse_amount(ev.candidate.raw_amount)
    if value is None or value <= MIN_BID_EXCLUSIVE or value > ev.max_amount:
        return RejectionReason.BID_OUT_OF_RANGE
    ev.value = value
    return None


def _check_whole_dollar(ev: _Evaluation) -> Optional[RejectionReason]:
    amount = whole_amount(ev.value)
    if amount is None:
        return RejectionReason.BID_NOT_INTEGRAL
    ev.amount = amount
    return None


def _check_lowest(ev: _Evaluation) -> Optional[RejectionReason]:
    current = current_minimum(ev.existing_bids)
    if current is not None and ev.amount >= current:
        return RejectionReason.BID_NOT_LOWEST
    return None


def current_minimum(existing_bids: Sequence[ExistingBid]) -> Optional[int]:
    """Lowest standing bid, or ``None`` for an auction with no bids yet."""
    if not existing_bids:
        return None
    return min(b.amount for b in existing_bids)


class BidValidator:
    """Ordered rule chain deciding whether a bid is accepted.

    ``default_max_amount`` bounds bids on auctions that carry no
    ``max_amount`` of their own.
    """

    _CHAIN: Tuple[Tuple[str, Callable[[_Evaluation], Optional[RejectionReason]]], ...] = (
        ("availability", _check_availability),
        ("eligibility", _check_eligibility),
        ("range", _check_range),
        ("whole_dollar", _check_whole_dollar),
        ("lowest", _check_lowest),
    )
    RULES: Tuple[str, ...] = tuple(name for name, _ in _CHAIN)

    def __init__(self, default_max_amount: Optional[int] = None):
        self.default_max_amount = (
            default_max_amount if default_max_amount is not None else config.MAX_BID_AMOUNT
        )

    def validate(
        self,
        auction: AuctionState,
        existing_bids: Sequence[ExistingBid],
        candidate: CandidateBid,
        eligible: bool,
    ) -> BidDecision:
        ev = _Evaluation(
            auction=auction,
            existing_bids=existing_bids,
            candidate=candidate,
            eligible=eligible,
            max_amount=(
                auction.max_amount if auction.max_amount is not None else self.default_max_amount
            ),
        )
        bidder_id = candidate.bidder.internal_id

        for name, rule in self._CHAIN:
            reason = rule(ev)
            if reason is not None:
                logger.info(
                    "Bid rejected by %s rule: bidder=%s raw_amount=%r reason=%s",
                    name, bidder_id, candidate.raw_amount, reason.value,
                )
                return BidDecision.reject(reason)

        logger.info("Bid accepted: bidder=%s amount=%s", bidder_id, ev.amount)
        return BidDecision.accept(amount=ev.amount, bidder_id=bidder_id)
