"""Move coin type helpers shared by the providers and the core."""

import re

_COIN_TYPE_RE = re.compile(r"^0x([0-9a-fA-F]{1,64})(::.+)$")


def normalize_coin_type(value: str) -> str:
    """Left-pad the address of a coin type to 64 hex digits.

    ``0x2::sui::SUI`` and ``0x0000...0002::sui::SUI`` name the same coin; the
    price API returns the long form. Values that are not coin types come
    back unchanged.
    """
    if not isinstance(value, str):
        return value
    match = _COIN_TYPE_RE.match(value.strip())
    if not match:
        return value
    address, rest = match.groups()
    return f"0x{address.lower().zfill(64)}{rest}"
