"""
Signed browser sessions.

The session cookie carries the local user id inside an HMAC-SHA256 signed,
expiring payload.  Decoding never raises: a missing, tampered or expired
cookie simply yields no user id, which the identity resolver treats as an
anonymous visitor.

Configuration is read from micropurchase.config.
"""

import base64
import hashlib
import hmac
import json
import time
from typing import Optional

from fastapi import Request

from micropurchase import config


def _sign(payload_bytes: bytes) -> str:
    """Create HMAC-SHA256 signature."""
    return hmac.new(config.AUTH_SECRET.encode(), payload_bytes, hashlib.sha256).hexdigest()


def create_session_token(user_id: int, expires_in: Optional[int] = None) -> str:
    """Create a signed session token for a local user id."""
    ttl = config.SESSION_EXPIRY_SECONDS if expires_in is None else expires_in
    payload = {
        "uid": int(user_id),
        "exp": int(time.time()) + ttl,
    }
    payload_b64 = base64.urlsafe_b64encode(json.dumps(payload).encode()).decode()
    sig = _sign(payload_b64.encode())
    return f"{payload_b64}.{sig}"


def decode_session_token(token: Optional[str]) -> Optional[int]:
    """Verify a session token and return the user id it carries."""
    if not token:
        return None
    parts = token.split(".", 1)
    if len(parts) != 2:
        return None
    payload_b64, sig = parts
    try:
        if not hmac.compare_digest(sig.encode(), _sign(payload_b64.encode()).encode()):
            return None
        payload = json.loads(base64.urlsafe_b64decode(payload_b64))
        uid = int(payload["uid"])
        exp = int(payload.get("exp", 0))
    except (ValueError, TypeError, KeyError):
        return None
    if exp < time.time():
        return None
    return uid


def session_user_id(request: Request) -> Optional[int]:
    """Extract the local user id from the request's session cookie."""
    return decode_session_token(request.cookies.get(config.SESSION_COOKIE_NAME))
