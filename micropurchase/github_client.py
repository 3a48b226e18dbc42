"""
GitHub as the identity provider for API credentials.

An API key presented by a programmatic client is a GitHub access token.
We ask GitHub who it belongs to (``GET /user``) and hand back the stable
numeric GitHub user id; mapping that id to a local user is the identity
resolver's job.

Configuration is read from micropurchase.config (see config.py).
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from micropurchase import config
from micropurchase.domain.errors import ProviderAuthenticationError

logger = logging.getLogger(__name__)

GITHUB_USER_PATH = "/user"


class GitHubIdentityProvider:
    """Looks up the GitHub user id behind an access token.

    Pass ``client`` to reuse a connection pool (or inject a mock transport
    in tests); otherwise a short-lived client is opened per lookup.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = (base_url or config.GITHUB_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.GITHUB_TIMEOUT_SECONDS
        self._client = client

    def external_id_for(self, credential: str, timeout: Optional[float] = None) -> str:
        """Return the GitHub user id (as a string) owning ``credential``.

        Raises ``ProviderAuthenticationError`` when GitHub refuses the
        token.  Transport failures and unexpected statuses propagate as
        ``httpx.HTTPError``.
        """
        url = f"{self.base_url}{GITHUB_USER_PATH}"
        headers = {
            "Authorization": f"token {credential}",
            "Accept": "application/vnd.github+json",
        }
        effective_timeout = timeout if timeout is not None else self.timeout

        if self._client is not None:
            resp = self._client.get(url, headers=headers, timeout=effective_timeout)
        else:
            with httpx.Client() as client:
                resp = client.get(url, headers=headers, timeout=effective_timeout)

        if resp.status_code in (401, 403):
            message = _error_message(resp)
            logger.info("GitHub rejected API credential: %s %s", resp.status_code, message)
            raise ProviderAuthenticationError(f"Error authenticating via GitHub: {message}")
        resp.raise_for_status()

        try:
            body = resp.json()
        except ValueError:
            body = None
        user_id = body.get("id") if isinstance(body, dict) else None
        if user_id is None:
            raise ProviderAuthenticationError("Error authenticating via GitHub: response has no user id")
        return str(user_id)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.reason_phrase
