"""Exact conversion between entered token amounts and integer base units.

Amounts are handled as text and integers only. The fractional part is
right-padded or truncated to the token's decimals; digits beyond the
precision are dropped, never rounded.
"""

import re
from dataclasses import dataclass

from tokenrelay.errors import InvalidAmountFormat

MAX_DECIMALS = 36

_AMOUNT_PATTERN = re.compile(r"^([0-9]+)(?:\.([0-9]+))?$")


def _check_decimals(decimals: int) -> int:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise InvalidAmountFormat(f"Token decimals must be an integer, got {decimals!r}")
    if decimals < 0 or decimals > MAX_DECIMALS:
        raise InvalidAmountFormat(f"Token decimals out of range: {decimals}")
    return decimals


def to_base_units(amount_text: str, decimals: int) -> int:
    """Convert a decimal amount string into integer base units.

    Args:
        amount_text: Non-negative decimal numeral, e.g. ``"1.5"``
        decimals: Token precision (0-36)

    Returns:
        Amount in base units

    Raises:
        InvalidAmountFormat: If the text is not a valid numeral or the
            precision is out of range
    """
    decimals = _check_decimals(decimals)
    if not isinstance(amount_text, str):
        raise InvalidAmountFormat(f"Amount must be text, got {type(amount_text).__name__}")

    match = _AMOUNT_PATTERN.match(amount_text.strip())
    if not match:
        raise InvalidAmountFormat(f"Invalid amount: {amount_text!r}")

    whole, fraction = match.group(1), match.group(2) or ""
    fraction = fraction[:decimals].ljust(decimals, "0")
    return int(whole + fraction)


def format_units(base_units: int, decimals: int) -> str:
    """Render base units as a decimal string without trailing zeros."""
    decimals = _check_decimals(decimals)
    if base_units < 0:
        raise InvalidAmountFormat("Base units must be non-negative")

    digits = str(base_units).rjust(decimals + 1, "0")
    whole, fraction = digits[: len(digits) - decimals], digits[len(digits) - decimals:]
    fraction = fraction.rstrip("0")
    return f"{whole}.{fraction}" if fraction else whole


@dataclass(frozen=True)
class TokenAmount:
    """An amount as entered by the user plus the token's precision."""

    text: str
    decimals: int

    @property
    def base_units(self) -> int:
        return to_base_units(self.text, self.decimals)

    def __str__(self) -> str:
        return self.text.strip()
