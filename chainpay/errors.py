"""
Exception hierarchy for chainpay.

Every error raised by the package derives from ChainPayError so callers
can catch the whole family, or branch on the specific cause.
"""

from __future__ import annotations

from decimal import Decimal


class ChainPayError(Exception):
    """Base exception for all chainpay errors."""

    pass


# Request pipeline


class TransportError(ChainPayError):
    """Raised when the HTTP request itself fails (connection, timeout)."""

    pass


class ExplorerAPIError(ChainPayError):
    """Raised when the explorer API reports a failure."""

    def __init__(self, message: str):
        super().__init__(f"Explorer API error: {message}")
        self.message = message


class SerializationError(ChainPayError):
    """Raised when a response does not have the expected shape."""

    pass


class ConfigurationError(ChainPayError, ValueError):
    """Raised eagerly when client configuration is invalid."""

    pass


# Payment domain


class PaymentError(ChainPayError):
    """Base exception for payment verification errors."""

    pass


class InvalidAddressError(PaymentError):
    def __init__(self, address: str):
        super().__init__(f"Invalid address format: {address}")
        self.address = address


class InvalidTxHashError(PaymentError):
    def __init__(self, tx_hash: str):
        super().__init__(f"Invalid transaction hash: {tx_hash}")
        self.tx_hash = tx_hash


class TransactionNotFoundError(PaymentError):
    def __init__(self, detail: str):
        super().__init__(f"Transaction not found: {detail}")
        self.detail = detail


class VerificationFailedError(PaymentError):
    def __init__(self, reason: str):
        super().__init__(f"Payment verification failed: {reason}")
        self.reason = reason


class AmountMismatchError(PaymentError):
    def __init__(self, expected: Decimal, actual: Decimal):
        super().__init__(f"Amount mismatch: expected {expected}, found {actual}")
        self.expected = expected
        self.actual = actual


class RecipientMismatchError(PaymentError):
    def __init__(self, expected: str, actual: str):
        super().__init__(f"Recipient mismatch: expected {expected}, found {actual}")
        self.expected = expected
        self.actual = actual


class TokenMismatchError(PaymentError):
    def __init__(self, expected: str, actual: str):
        super().__init__(
            f"Token contract mismatch: expected {expected}, found {actual}"
        )
        self.expected = expected
        self.actual = actual


class InsufficientConfirmationsError(PaymentError):
    def __init__(self, current: int, required: int):
        super().__init__(f"Insufficient confirmations: {current}/{required}")
        self.current = current
        self.required = required


class PaymentTimeoutError(PaymentError):
    def __init__(self, timeout_seconds: int):
        super().__init__(
            f"Payment timeout: no transaction found within {timeout_seconds} seconds"
        )
        self.timeout_seconds = timeout_seconds
