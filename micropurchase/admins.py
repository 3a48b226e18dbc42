"""
Admin capability check keyed by GitHub user id.
"""

from __future__ import annotations

from typing import Iterable, Optional

from micropurchase import config


class AdminRegistry:
    """Allowlist of GitHub user ids with admin rights.

    Defaults to ``config.ADMIN_GITHUB_IDS``.
    """

    def __init__(self, github_ids: Optional[Iterable[str]] = None):
        ids = config.ADMIN_GITHUB_IDS if github_ids is None else github_ids
        self._ids = frozenset(str(i) for i in ids)

    def verify(self, external_id: Optional[str]) -> bool:
        if external_id is None:
            return False
        return str(external_id) in self._ids
