"""Amount conversion and comparison helpers.

Wire values are integers in the currency's smallest unit (wei for the
native asset); payment requests are expressed in major units. Everything
here is pure and works on Decimal.
"""

from __future__ import annotations

import re
from decimal import ROUND_DOWN, Decimal, localcontext

NATIVE_DECIMALS = 18
GWEI_DECIMALS = 9

# uint256 has 78 decimal digits
_PRECISION = 80

_ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")
_TX_HASH_RE = re.compile(r"0x[0-9a-fA-F]{64}")


def to_major(minor: int, decimals: int) -> Decimal:
    """Convert a minor-unit integer to a Decimal in major units."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(minor).scaleb(-decimals)


def to_minor(major: Decimal, decimals: int) -> int:
    """Convert a major-unit Decimal to minor units, truncating any dust.

    Raises:
        ValueError: If the amount is negative
    """
    if major < 0:
        raise ValueError(f"Amount cannot be negative: {major}")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = Decimal(major).scaleb(decimals)
        return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def wei_to_ether(wei: int) -> Decimal:
    return to_major(wei, NATIVE_DECIMALS)


def ether_to_wei(ether: Decimal) -> int:
    return to_minor(ether, NATIVE_DECIMALS)


def wei_to_gwei(wei: int) -> Decimal:
    return to_major(wei, GWEI_DECIMALS)


def gwei_to_wei(gwei: Decimal) -> int:
    return to_minor(gwei, GWEI_DECIMALS)


def parse_token_amount(amount: str) -> int:
    """Parse a raw minor-unit amount as returned by the explorer.

    Raises:
        ValueError: If the string is not a non-negative integer
    """
    text = amount.strip()
    if not text.isdigit():
        raise ValueError(f"Invalid token amount: {amount!r}")
    return int(text)


def format_token_amount(amount: int, decimals: int) -> str:
    """Format a minor-unit amount for display, e.g. (1500000, 6) -> "1.500000"."""
    divisor = 10**decimals
    whole, fractional = divmod(amount, divisor)
    if fractional == 0:
        return str(whole)
    return f"{whole}.{fractional:0{decimals}d}"


def amount_sufficient(expected: Decimal, actual: Decimal, min_percent: Decimal) -> bool:
    """Check that actual covers at least min_percent of expected.

    Over-payment always passes.
    """
    min_required = expected * min_percent / Decimal(100)
    return actual >= min_required


def amounts_match(
    expected: Decimal, actual: Decimal, tolerance_percent: Decimal
) -> bool:
    """Check that actual is within tolerance_percent of expected, either side."""
    if expected == 0:
        return actual == 0

    diff = abs(actual - expected)
    tolerance_amount = expected * tolerance_percent / Decimal(100)
    return diff <= tolerance_amount


def is_valid_address(address: str) -> bool:
    """0x-prefixed, 40 hex digits."""
    return bool(_ADDRESS_RE.fullmatch(address))


def is_valid_tx_hash(tx_hash: str) -> bool:
    """0x-prefixed, 64 hex digits."""
    return bool(_TX_HASH_RE.fullmatch(tx_hash))
