"""
Quantity and foil marker parsing.

Exports write quantities as "2x", "x2" or "2" and mark foils with "Foil",
"true", "1" or whatever the app happens to emit. Both parsers are total.
"""

import re

# First contiguous run of digits anywhere in the string
_DIGITS = re.compile(r"(\d+)")

# Largest count the ownership columns hold; longer digit runs clamp to it
MAX_QUANTITY = 2**31 - 1


def parse_quantity(value: str | None) -> int:
    """
    Parse a free-form quantity string.

    Examples:
        "2x" -> 2, "x3" -> 3, "-5" -> 5, "" -> 1, "abc" -> 1,
        "99999999999" -> MAX_QUANTITY
    """
    if not value or not value.strip():
        return 1

    match = _DIGITS.search(value)
    if not match:
        return 1

    digits = match.group(1).lstrip("0") or "0"
    if len(digits) > len(str(MAX_QUANTITY)):
        return MAX_QUANTITY
    return min(int(digits), MAX_QUANTITY)


def parse_foil(value: str | None) -> bool:
    """
    Parse a free-form foil marker.

    Blank and "false" (any case) are non-foil. Every other non-blank
    value, including arbitrary text, marks a foil.
    """
    if not value or not value.strip():
        return False
    return value.strip().lower() != "false"
