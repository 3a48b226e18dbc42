"""
Identity resolution for both request channels.

  - Session path: the signed session carries a local user id; we look the
    user up in the local directory.
  - Credential path: the API key is handed to the identity provider
    (GitHub), which answers with an external id; we map that to a local user.

Neither path raises for "nobody": a miss is a ``Resolution`` with status
NOT_FOUND.  A provider that refuses the credential is downgraded to
UPSTREAM_FAILURE, which callers treat like NOT_FOUND but can still tell
apart.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from micropurchase import metrics
from micropurchase.domain.errors import ProviderAuthenticationError
from micropurchase.domain.models import Identity, Resolution

logger = logging.getLogger(__name__)


class UserDirectory(Protocol):
    def find_by_id(self, user_id: int) -> Optional[Identity]: ...

    def find_by_external_id(self, external_id: str) -> Optional[Identity]: ...


class IdentityProvider(Protocol):
    def external_id_for(self, credential: str, timeout: Optional[float] = None) -> str: ...


class IdentityResolver:
    def __init__(self, users: UserDirectory, provider: IdentityProvider):
        self.users = users
        self.provider = provider

    def resolve_by_session(self, session_user_id: Optional[int]) -> Resolution:
        if session_user_id is None:
            return Resolution.not_found("no session")
        identity = self.users.find_by_id(session_user_id)
        if identity is None:
            return Resolution.not_found(f"no user with id {session_user_id}")
        return Resolution.resolved(identity)

    def resolve_by_credential(
        self,
        credential: Optional[str],
        timeout: Optional[float] = None,
    ) -> Resolution:
        if not credential:
            return Resolution.not_found("no credential")

        try:
            external_id = self.provider.external_id_for(credential, timeout=timeout)
        except ProviderAuthenticationError as exc:
            logger.warning("Credential resolution downgraded to not-found: %s", exc)
            metrics.record_upstream_auth_failure()
            return Resolution.upstream_failure(str(exc))

        identity = self.users.find_by_external_id(external_id)
        if identity is None:
            return Resolution.not_found(f"no user for external id {external_id}")
        return Resolution.resolved(identity)
