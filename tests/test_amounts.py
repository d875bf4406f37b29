"""
Tests for amount conversion, tolerance checks and address validation.
"""

from decimal import Decimal

import pytest

from chainpay.amounts import (
    amount_sufficient,
    amounts_match,
    ether_to_wei,
    format_token_amount,
    gwei_to_wei,
    is_valid_address,
    is_valid_tx_hash,
    parse_token_amount,
    to_major,
    to_minor,
    wei_to_ether,
    wei_to_gwei,
)


class TestUnitConversion:
    """Tests for minor/major unit conversion."""

    def test_wei_to_ether(self):
        assert wei_to_ether(10**18) == Decimal(1)
        assert wei_to_ether(15 * 10**17) == Decimal("1.5")

    def test_ether_to_wei(self):
        assert ether_to_wei(Decimal("1.5")) == 15 * 10**17

    def test_gwei_conversions(self):
        assert wei_to_gwei(20 * 10**9) == Decimal(20)
        assert gwei_to_wei(Decimal("1.5")) == 1_500_000_000

    def test_token_decimals(self):
        """USDT uses 6 decimals."""
        assert to_major(1_500_000, 6) == Decimal("1.5")
        assert to_minor(Decimal("1.5"), 6) == 1_500_000

    def test_zero_decimals(self):
        assert to_major(42, 0) == Decimal(42)

    def test_uint256_max_is_exact(self):
        """Conversion must not lose digits for the largest on-chain value."""
        max_uint = 2**256 - 1
        assert to_minor(to_major(max_uint, 18), 18) == max_uint

    @pytest.mark.parametrize(
        "value, decimals",
        [
            (0, 0),
            (0, 18),
            (1, 0),
            (123_456_789, 6),
            (10**18, 18),
            (2**256 - 1, 0),
            (1, 255),
            (2**256 - 1, 255),
        ],
    )
    def test_minor_major_round_trip(self, value, decimals):
        assert to_minor(to_major(value, decimals), decimals) == value

    def test_to_minor_truncates_dust(self):
        assert to_minor(Decimal("1.0000009"), 6) == 1_000_000

    def test_to_minor_rejects_negative(self):
        with pytest.raises(ValueError):
            to_minor(Decimal("-1"), 18)


class TestParseAndFormat:
    """Tests for raw amount parsing and display formatting."""

    def test_parse_token_amount(self):
        assert parse_token_amount("1000000") == 1_000_000
        assert parse_token_amount(" 42 ") == 42

    @pytest.mark.parametrize("raw", ["", "abc", "-5", "1.5", "0x10"])
    def test_parse_token_amount_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_token_amount(raw)

    def test_format_token_amount(self):
        assert format_token_amount(1_500_000, 6) == "1.500000"
        assert format_token_amount(2_000_000, 6) == "2"
        assert format_token_amount(1, 6) == "0.000001"


class TestTolerance:
    """Tests for amount tolerance checks."""

    def test_exact_amount_is_sufficient(self):
        assert amount_sufficient(Decimal(100), Decimal(100), Decimal("99.9"))

    def test_overpayment_is_sufficient(self):
        assert amount_sufficient(Decimal(100), Decimal(150), Decimal("99.9"))

    @pytest.mark.parametrize(
        "expected, actual, min_percent, sufficient",
        [
            (Decimal(5), Decimal(0), Decimal("99.9"), False),
            (Decimal(5), Decimal(0), Decimal(0), True),
            (Decimal(0), Decimal(0), Decimal("99.9"), True),
        ],
    )
    def test_zero_amounts(self, expected, actual, min_percent, sufficient):
        assert amount_sufficient(expected, actual, min_percent) is sufficient

    def test_threshold_boundary(self):
        """99.9% of 100 is exactly 99.9."""
        assert amount_sufficient(Decimal(100), Decimal("99.9"), Decimal("99.9"))
        assert not amount_sufficient(Decimal(100), Decimal("99.89"), Decimal("99.9"))

    def test_amounts_match_is_symmetric(self):
        assert amounts_match(Decimal(100), Decimal("100.05"), Decimal("0.1"))
        assert amounts_match(Decimal(100), Decimal("99.95"), Decimal("0.1"))
        assert not amounts_match(Decimal(100), Decimal("100.2"), Decimal("0.1"))

    def test_amounts_match_zero_expected(self):
        assert amounts_match(Decimal(0), Decimal(0), Decimal(1))
        assert not amounts_match(Decimal(0), Decimal("0.0001"), Decimal(1))


class TestValidation:
    """Tests for address and hash syntax checks."""

    def test_valid_address(self):
        assert is_valid_address("0x742d35Cc6634C0532925a3b844Bc454e4438f44e")

    @pytest.mark.parametrize(
        "address",
        [
            "",
            "742d35Cc6634C0532925a3b844Bc454e4438f44e",
            "0x742d35Cc6634C0532925a3b844Bc454e4438f44",
            "0x742d35Cc6634C0532925a3b844Bc454e4438f44e0",
            "0xZZ2d35Cc6634C0532925a3b844Bc454e4438f44e",
            "0x742d35Cc6634C0532925a3b844Bc454e4438f44e\n",
        ],
    )
    def test_invalid_address(self, address):
        assert not is_valid_address(address)

    def test_tx_hash(self):
        assert is_valid_tx_hash("0x" + "ab" * 32)
        assert not is_valid_tx_hash("0x" + "ab" * 31)
        assert not is_valid_tx_hash("ab" * 32)
