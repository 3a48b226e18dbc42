"""
Bid placement: read the auction snapshot, validate, write, all in one
transaction.

The auction row is locked before the standing bids are read
(``SELECT ... FOR UPDATE``; on SQLite the engine opens the transaction with
``BEGIN IMMEDIATE`` instead), so two concurrent bidders are serialised
and each accepted bid was checked against the bids that were actually
standing when it was written.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Tuple

from sqlalchemy.orm import Session

from micropurchase import metrics
from micropurchase.bid_validator import BidValidator
from micropurchase.database import (
    Bid, existing_bids, get_auction, get_auction_bids, is_eligible_bidder,
)
from micropurchase.domain.errors import AuctionNotFound
from micropurchase.domain.models import BidDecision, CandidateBid, Identity

logger = logging.getLogger(__name__)


def place_bid(
    db: Session,
    auction_id: int,
    bidder: Identity,
    raw_amount: Any,
    validator: Optional[BidValidator] = None,
    now: Optional[datetime] = None,
) -> Tuple[BidDecision, Optional[Bid]]:
    """Validate ``raw_amount`` for ``bidder`` and persist it when accepted.

    Returns the decision and, on acceptance, the stored ``Bid`` row.
    Raises ``AuctionNotFound`` for an unknown auction id.
    """
    validator = validator or BidValidator()

    try:
        auction = get_auction(db, auction_id, for_update=True)
        if auction is None:
            raise AuctionNotFound(auction_id)

        decision = validator.validate(
            auction=auction.state(now),
            existing_bids=existing_bids(get_auction_bids(db, auction_id)),
            candidate=CandidateBid(raw_amount=raw_amount, bidder=bidder),
            eligible=is_eligible_bidder(db, bidder.internal_id),
        )

        if not decision.accepted:
            db.rollback()
            metrics.record_bid_rejected(decision.reason)
            return decision, None

        bid = Bid(auction_id=auction_id, bidder_id=decision.bidder_id, amount=decision.amount)
        db.add(bid)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(bid)
    metrics.record_bid_accepted()
    logger.info("Bid %s stored on auction %s: $%s", bid.id, auction_id, bid.amount)
    return decision, bid
