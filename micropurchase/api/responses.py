"""
Channel-aware error presentation.

Browser requests get a redirect carrying the message; programmatic requests
get ``{"error": message}`` with a status code.
"""

from __future__ import annotations

from urllib.parse import urlencode

from fastapi.responses import JSONResponse, RedirectResponse, Response

from micropurchase import config
from micropurchase.domain.enums import RequestMode


def error_response(
    mode: RequestMode,
    message: str,
    status_code: int,
    redirect_to: str = "/",
) -> Response:
    if mode == RequestMode.BROWSER:
        return RedirectResponse(f"{redirect_to}?{urlencode({'error': message})}", status_code=302)
    return JSONResponse(status_code=status_code, content={"error": message})


def login_redirect() -> RedirectResponse:
    return RedirectResponse(config.LOGIN_PATH, status_code=302)
