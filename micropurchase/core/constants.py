"""
Micropurchase — system-wide constants.

Every magic number lives here. If you find a literal in the codebase that is
not a local variable, it belongs here instead.
"""

# ---------------------------------------------------------------------------
# Bid amounts
# ---------------------------------------------------------------------------

# Bids are whole dollars; anything at or below this is out of range.
MIN_BID_EXCLUSIVE: int = 0

# Raw bid inputs longer than this are rejected before parsing.
MAX_RAW_AMOUNT_LENGTH: int = 64

# ---------------------------------------------------------------------------
# Request channels
# ---------------------------------------------------------------------------

FORMAT_QUERY_PARAM: str = "format"
JSON_FORMATS = frozenset({"json"})
HTML_FORMATS = frozenset({"html"})

# ---------------------------------------------------------------------------
# HTTP status codes used by the presenter
# ---------------------------------------------------------------------------

# Authentication and authorization failures both answer 404.
STATUS_UNAUTHORIZED: int = 404
STATUS_BID_REJECTED: int = 403
STATUS_NOT_ACCEPTABLE: int = 406

# ---------------------------------------------------------------------------
# Error messages
# ---------------------------------------------------------------------------

MSG_USER_NOT_FOUND: str = "User not found"
MSG_UNAUTHORIZED: str = "Unauthorized"
MSG_AUCTION_NOT_FOUND: str = "Auction not found"
MSG_UNSUPPORTED_FORMAT: str = "Unsupported response format"
