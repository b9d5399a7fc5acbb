"""Price parsing for noisy OCR output ("$14.00", "1,200", "12 USD", 9.5)."""

from __future__ import annotations

import math
import re
from numbers import Real
from typing import Any

_NON_PRICE_CHARS = re.compile(r"[^0-9.]")
# Leading float, same as what a lenient parser accepts: "14.00.5" -> 14.0
_LEADING_FLOAT = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def normalize_price(value: Any) -> float | None:
    """Parse a price from a number or string; None when nothing usable is found."""
    if isinstance(value, Real) and not isinstance(value, bool):
        number = float(value)
        if not math.isfinite(number) or number < 0:
            return None
        return value  # type: ignore[return-value]
    if not value:
        return None

    cleaned = _NON_PRICE_CHARS.sub("", str(value))
    match = _LEADING_FLOAT.match(cleaned)
    if match is None:
        return None
    parsed = float(match.group())
    return parsed if math.isfinite(parsed) else None
