"""
micropurchase.domain.enums — All enumerations used across the service.

Keep this module import-clean (stdlib only).
"""

from enum import Enum


# ---------------------------------------------------------------------------
# Auction lifecycle
# ---------------------------------------------------------------------------

class AuctionStatus(str, Enum):
    FUTURE  = "future"
    RUNNING = "running"
    CLOSED  = "closed"


# ---------------------------------------------------------------------------
# Request channel
# ---------------------------------------------------------------------------

class RequestMode(str, Enum):
    """
    How the caller talks to us.

    browser:      HTML clients holding a session cookie; failures redirect.
    programmatic: JSON clients presenting an API key; failures are hard errors.
    other:        any other declared format; not served.
    """
    BROWSER      = "browser"
    PROGRAMMATIC = "programmatic"
    OTHER        = "other"


# ---------------------------------------------------------------------------
# Identity resolution
# ---------------------------------------------------------------------------

class ResolutionStatus(str, Enum):
    RESOLVED         = "resolved"
    NOT_FOUND        = "not_found"
    UPSTREAM_FAILURE = "upstream_failure"


# ---------------------------------------------------------------------------
# Bid rejection reasons (declared in evaluation order)
# ---------------------------------------------------------------------------

class RejectionReason(str, Enum):
    AUCTION_NOT_AVAILABLE = "auction_not_available"
    BIDDER_INELIGIBLE     = "bidder_ineligible"
    BID_OUT_OF_RANGE      = "bid_out_of_range"
    BID_NOT_INTEGRAL      = "bid_not_integral"
    BID_NOT_LOWEST        = "bid_not_lowest"

    @property
    def message(self) -> str:
        """User-facing message shown by both browser and JSON responses."""
        return {
            "auction_not_available": "Auction not available",
            "bidder_ineligible": "You must have a valid SAM.gov account to place a bid",
            "bid_out_of_range": "Bid amount out of range",
            "bid_not_integral": "Bids must be in increments of one dollar",
            "bid_not_lowest": "Bids cannot be greater than the current max bid",
        }[self.value]
