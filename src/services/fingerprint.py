"""Content-derived fingerprint of a business profile.

The fingerprint keys the artifact cache: two profiles that agree on the
projected fields share cached artifacts, and any change to one of them
yields a new key.  The hash is the 32-bit ``h * 31 + c`` rolling hash over
UTF-16 code units, rendered in base 36, so fingerprints match the profile
hashes already stored by the web application.  It is not cryptographic.
"""

from __future__ import annotations

from src.models.business import BusinessContext

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def projection(context: BusinessContext) -> str:
    """Join the fields that define cache identity.

    Goals are sorted so their order does not change the fingerprint.
    """
    goals = ",".join(sorted(context.marketing_goals or []))
    return "|".join(
        [
            context.name or "",
            context.industry or "",
            context.niche or "",
            context.target_audience or "",
            context.brand_voice or "",
            goals,
        ]
    )


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x1_0000_0000 if value & 0x8000_0000 else value


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return sign + "".join(reversed(digits))


def rolling_hash(text: str) -> int:
    """Signed 32-bit ``h = h * 31 + code_unit`` over UTF-16 code units."""
    h = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        h = _to_int32((h << 5) - h + code_unit)
    return h


def fingerprint(context: BusinessContext) -> str:
    """Return the cache fingerprint for ``context``.  Pure and total."""
    return _base36(rolling_hash(projection(context)))
