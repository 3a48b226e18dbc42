"""
micropurchase.domain.errors — Hard authentication / authorization failures.

Bid rejections are not exceptions; see ``BidDecision``.
"""

from __future__ import annotations

from typing import Optional

from micropurchase.core.constants import MSG_UNAUTHORIZED, MSG_USER_NOT_FOUND
from micropurchase.domain.models import Resolution


class UnauthorizedError(Exception):
    default_message = MSG_UNAUTHORIZED

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class UserNotFound(UnauthorizedError):
    """Authentication was mandatory and no identity could be resolved.

    ``resolution`` keeps the failed lookup so callers can tell a credential
    that maps to no user apart from an identity-provider failure.
    """
    default_message = MSG_USER_NOT_FOUND

    def __init__(self, message: Optional[str] = None, resolution: Optional[Resolution] = None):
        super().__init__(message)
        self.resolution = resolution


class MustBeAdmin(UnauthorizedError):
    default_message = MSG_UNAUTHORIZED


class ProviderAuthenticationError(UnauthorizedError):
    """The identity provider rejected the presented credential."""
    default_message = "Error authenticating via GitHub"


class UnsupportedFormat(Exception):
    """The request declared a response format we do not serve."""


class AuctionNotFound(LookupError):
    """No auction with the requested id."""
