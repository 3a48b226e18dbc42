"""
Micropurchase — shared utilities.

Pure functions used across the package. No imports from other micropurchase
modules; only the standard library and micropurchase.core.constants are
allowed.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from micropurchase.core.constants import MAX_RAW_AMOUNT_LENGTH


# ---------------------------------------------------------------------------
# Bid amounts
# ---------------------------------------------------------------------------

def parse_amount(raw: Any) -> Optional[Decimal]:
    """Parse a raw bid amount from whatever the transport handed us.

    Accepts ints, floats, Decimals and numeric strings (surrounding
    whitespace ignored).  Returns ``None`` for anything that is not a finite
    number: garbage strings, empty strings, ``None``, booleans, NaN and
    infinities.

    Floats go through ``str()`` so ``1.99`` parses as ``Decimal("1.99")``
    rather than its binary expansion.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, int):
        value = Decimal(raw)
    elif isinstance(raw, float):
        value = Decimal(str(raw))
    elif isinstance(raw, str):
        text = raw.strip()
        if not text or len(text) > MAX_RAW_AMOUNT_LENGTH:
            return None
        try:
            value = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not value.is_finite():
        return None
    return value


def whole_amount(value: Decimal) -> Optional[int]:
    """Return ``value`` as an int if it has no fractional part, else ``None``.

    Strict equality: ``Decimal("40.0")`` is 40, ``Decimal("39.999999")`` is
    not a whole amount.
    """
    if value != value.to_integral_value():
        return None
    return int(value)


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------

def utcnow() -> datetime:
    """Naive UTC now, matching how timestamps are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
