"""Value coercion helpers for inbound case payloads."""

from __future__ import annotations

import math
import re
from typing import Any, List

_HEX32 = re.compile(r"[0-9a-fA-F]{32}")
_HEX32_EXACT = re.compile(r"^[0-9a-fA-F]{32}$")
# Plain decimal literals only: no underscores, hex, or non-ASCII digits.
_DECIMAL = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")


def safe_str(value: Any) -> str:
    """Stringify a scalar ``value``.

    ``None`` and containers (lists, dicts, sets) become the empty string, so a
    structured value never turns into a select label or title.
    """

    if value is None or isinstance(value, (list, tuple, dict, set)):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number_or_none(value: Any) -> int | float | None:
    """Parse ``value`` as a number; anything unparseable yields ``None``."""

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = value
    else:
        text = safe_str(value).strip()
        if not _DECIMAL.match(text):
            return None
        try:
            number = float(text)
        except ValueError:
            return None

    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if number.is_integer() and not isinstance(value, float):
            return int(number)
    return number


def normalize_list(value: Any) -> List[str]:
    """Return the non-empty trimmed entries of a list or comma separated string."""

    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [safe_str(item).strip() for item in value]
    else:
        items = [segment.strip() for segment in safe_str(value).split(",")]
    return [item for item in items if item]


def normalize_database_id(value: Any) -> str | None:
    """Return the dashed lowercase form of a Notion id, or ``None`` if there is none.

    Accepts a bare 32 hex token, a dashed UUID, or a URL embedding the token.
    """

    raw = safe_str(value).strip()
    match = _HEX32.search(raw)
    candidate = (match.group(0) if match else raw).replace("-", "")
    if not _HEX32_EXACT.match(candidate):
        return None

    return "-".join(
        (candidate[:8], candidate[8:12], candidate[12:16], candidate[16:20], candidate[20:])
    ).lower()


__all__ = [
    "normalize_database_id",
    "normalize_list",
    "safe_str",
    "to_number_or_none",
]
