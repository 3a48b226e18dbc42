"""
Request channel selection.

The declared response format decides whether a request is treated as a
browser request (session cookie, redirects) or a programmatic one (API key,
JSON errors).  An explicit ``?format=`` query parameter wins over the
``Accept`` header.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from micropurchase import config
from micropurchase.core.constants import FORMAT_QUERY_PARAM, HTML_FORMATS, JSON_FORMATS
from micropurchase.domain.enums import RequestMode


def mode_for(format_param: Optional[str], accept: Optional[str]) -> RequestMode:
    if format_param:
        fmt = format_param.strip().lower()
        if fmt in JSON_FORMATS:
            return RequestMode.PROGRAMMATIC
        if fmt in HTML_FORMATS:
            return RequestMode.BROWSER
        return RequestMode.OTHER

    accept = (accept or "").strip().lower()
    if "json" in accept:
        return RequestMode.PROGRAMMATIC
    if not accept or "text/html" in accept or "*/*" in accept:
        return RequestMode.BROWSER
    return RequestMode.OTHER


def request_mode(request: Request) -> RequestMode:
    return mode_for(
        request.query_params.get(FORMAT_QUERY_PARAM),
        request.headers.get("accept"),
    )


def api_key(request: Request) -> Optional[str]:
    """The raw API credential, if the client sent one."""
    value = request.headers.get(config.API_KEY_HEADER)
    return value or None
