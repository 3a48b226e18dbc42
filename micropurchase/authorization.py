"""
Authentication / authorization gate.

Two entry points, one per channel, share a single ``IdentityResolver``:

  - ``authenticate_browser``      session lookup; a miss returns ``None`` so
                                  the caller can redirect to the login page.
  - ``authenticate_programmatic`` credential lookup; a miss raises
                                  ``UserNotFound`` (API clients cannot be
                                  redirected).

``require_admin`` always authenticates with raising enabled, whatever the
channel, and only then asks the admin registry.  "Not an admin" is never
reported for a caller whose identity has not been established.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional, Protocol

from micropurchase import metrics
from micropurchase.domain.enums import RequestMode
from micropurchase.domain.errors import MustBeAdmin, UnsupportedFormat, UserNotFound
from micropurchase.domain.models import Identity, Resolution
from micropurchase.identity import IdentityResolver

logger = logging.getLogger(__name__)


class AdminVerifier(Protocol):
    def verify(self, external_id: Optional[str]) -> bool: ...


class AuthorizationGate:
    def __init__(self, resolver: IdentityResolver, admins: AdminVerifier):
        self.resolver = resolver
        self.admins = admins

    # ------------------------------------------------------------------
    # Channel entry points
    # ------------------------------------------------------------------

    def authenticate_browser(self, session_user_id: Optional[int]) -> Optional[Identity]:
        return self.resolver.resolve_by_session(session_user_id).identity

    def authenticate_programmatic(
        self,
        credential: Optional[str],
        timeout: Optional[float] = None,
    ) -> Identity:
        resolution = self.resolver.resolve_by_credential(credential, timeout=timeout)
        if not resolution.found:
            raise self._user_not_found(RequestMode.PROGRAMMATIC, resolution)
        return resolution.identity

    # ------------------------------------------------------------------
    # Mode-dispatching helpers
    # ------------------------------------------------------------------

    def require_authenticated(
        self,
        mode: RequestMode,
        session_user_id: Optional[int] = None,
        credential: Optional[str] = None,
        raise_errors: bool = False,
    ) -> Optional[Identity]:
        """Authenticate through the channel's entry point.

        Browser callers get ``None`` back on a miss unless ``raise_errors``
        is set; programmatic callers always get ``UserNotFound``.
        """
        if mode == RequestMode.BROWSER:
            resolution = self.resolver.resolve_by_session(session_user_id)
            if not resolution.found and raise_errors:
                raise self._user_not_found(mode, resolution)
            return resolution.identity
        if mode == RequestMode.PROGRAMMATIC:
            return self.authenticate_programmatic(credential)
        raise UnsupportedFormat(mode.value)

    def current_identity(
        self,
        mode: RequestMode,
        session_user_id: Optional[int] = None,
        credential: Optional[str] = None,
    ) -> Optional[Identity]:
        """Optional authentication for public routes; never raises for a miss."""
        if mode == RequestMode.BROWSER:
            return self.resolver.resolve_by_session(session_user_id).identity
        if mode == RequestMode.PROGRAMMATIC:
            return self.resolver.resolve_by_credential(credential).identity
        return None

    def require_admin(
        self,
        mode: RequestMode,
        session_user_id: Optional[int] = None,
        credential: Optional[str] = None,
    ) -> Identity:
        identity = self.require_authenticated(
            mode,
            session_user_id=session_user_id,
            credential=credential,
            raise_errors=True,
        )
        if not self.admins.verify(identity.external_id):
            logger.info("Admin check failed for user %s", identity.internal_id)
            metrics.record_auth_failure()
            raise MustBeAdmin()
        return dataclasses.replace(identity, is_admin=True)

    @staticmethod
    def _user_not_found(mode: RequestMode, resolution: Resolution) -> UserNotFound:
        logger.info(
            "Authentication failed (%s): %s %s",
            mode.value, resolution.status.value, resolution.detail,
        )
        metrics.record_auth_failure()
        return UserNotFound(resolution=resolution)
