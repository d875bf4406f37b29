"""Data models for payment requests, verdicts and tracked payments.

Currency, VerificationVerdict and PaymentStatus are closed unions of
frozen models discriminated by their ``kind`` field. Consumers use
``match`` on the concrete classes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chainpay.amounts import NATIVE_DECIMALS


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# Currency


class NativeCurrency(_Frozen):
    """The chain's base asset (ETH, BNB)."""

    kind: Literal["native"] = "native"

    @property
    def decimals(self) -> int:
        return NATIVE_DECIMALS


class TokenCurrency(_Frozen):
    """A contract token with an explicitly declared decimal count."""

    kind: Literal["token"] = "token"
    contract_address: str = Field(..., min_length=1, description="Token contract")
    decimals: int = Field(..., ge=0, le=255, description="Token decimal places")


Currency = Annotated[Union[NativeCurrency, TokenCurrency], Field(discriminator="kind")]

NATIVE = NativeCurrency()


def token(contract_address: str, decimals: int) -> TokenCurrency:
    return TokenCurrency(contract_address=contract_address, decimals=decimals)


def usdt() -> TokenCurrency:
    """Tether on Ethereum mainnet (6 decimals)."""
    return token("0xdAC17F958D2ee523a2206206994597C13D831ec7", 6)


def usdc() -> TokenCurrency:
    """USD Coin on Ethereum mainnet (6 decimals)."""
    return token("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", 6)


def dai() -> TokenCurrency:
    """DAI on Ethereum mainnet (18 decimals)."""
    return token("0x6B175474E89094C44Da98b954EedeAC495271d0F", 18)


# Payment request


class PaymentRequest(_Frozen):
    """What the caller expects to receive."""

    amount: Decimal = Field(..., ge=0, description="Amount in major units")
    currency: Currency = Field(default=NATIVE, description="Currency to receive")
    recipient_address: str = Field(..., description="Address receiving the payment")
    required_confirmations: int = Field(
        default=12, ge=0, description="Confirmations needed to accept"
    )
    timeout_seconds: Optional[int] = Field(
        default=None, ge=0, description="Seconds before the payment expires"
    )

    @classmethod
    def native(
        cls, amount: Decimal, recipient_address: str, required_confirmations: int
    ) -> "PaymentRequest":
        return cls(
            amount=amount,
            currency=NATIVE,
            recipient_address=recipient_address,
            required_confirmations=required_confirmations,
        )

    @classmethod
    def token(
        cls,
        amount: Decimal,
        contract_address: str,
        decimals: int,
        recipient_address: str,
        required_confirmations: int,
    ) -> "PaymentRequest":
        return cls(
            amount=amount,
            currency=token(contract_address, decimals),
            recipient_address=recipient_address,
            required_confirmations=required_confirmations,
        )

    def with_timeout(self, timeout_seconds: int) -> "PaymentRequest":
        """Return a copy of this request that expires after timeout_seconds."""
        return self.model_copy(update={"timeout_seconds": timeout_seconds})

    def is_expired(self, created_at: datetime, now: datetime | None = None) -> bool:
        if self.timeout_seconds is None:
            return False
        now = as_utc(now) if now else datetime.now(timezone.utc)
        return (now - as_utc(created_at)).total_seconds() >= self.timeout_seconds


# Verification verdict


class VerdictNotFound(_Frozen):
    kind: Literal["not_found"] = "not_found"


class VerdictPending(_Frozen):
    kind: Literal["pending"] = "pending"
    tx_hash: str
    confirmations: int


class VerdictConfirmed(_Frozen):
    kind: Literal["confirmed"] = "confirmed"
    tx_hash: str
    confirmations: int


class VerdictFailed(_Frozen):
    kind: Literal["failed"] = "failed"
    reason: str


VerificationVerdict = Annotated[
    Union[VerdictNotFound, VerdictPending, VerdictConfirmed, VerdictFailed],
    Field(discriminator="kind"),
]


# Payment status


class StatusPending(_Frozen):
    """No matching transaction seen yet."""

    kind: Literal["pending"] = "pending"


class StatusDetected(_Frozen):
    """Transaction seen, waiting for confirmations."""

    kind: Literal["detected"] = "detected"
    tx_hash: str
    confirmations: int


class StatusConfirmed(_Frozen):
    kind: Literal["confirmed"] = "confirmed"
    tx_hash: str
    confirmations: int


class StatusFailed(_Frozen):
    kind: Literal["failed"] = "failed"
    reason: str


class StatusExpired(_Frozen):
    """The request's timeout elapsed before confirmation."""

    kind: Literal["expired"] = "expired"


PaymentStatus = Annotated[
    Union[StatusPending, StatusDetected, StatusConfirmed, StatusFailed, StatusExpired],
    Field(discriminator="kind"),
]


def status_from_verdict(verdict: VerificationVerdict) -> PaymentStatus:
    """Map a verification verdict to the payment status it implies."""
    match verdict:
        case VerdictNotFound():
            return StatusPending()
        case VerdictPending(tx_hash=tx_hash, confirmations=confirmations):
            return StatusDetected(tx_hash=tx_hash, confirmations=confirmations)
        case VerdictConfirmed(tx_hash=tx_hash, confirmations=confirmations):
            return StatusConfirmed(tx_hash=tx_hash, confirmations=confirmations)
        case VerdictFailed(reason=reason):
            return StatusFailed(reason=reason)
    raise TypeError(f"Unsupported verdict: {verdict!r}")


def is_finalized(status: PaymentStatus) -> bool:
    """Confirmed, failed and expired payments are terminal."""
    return isinstance(status, (StatusConfirmed, StatusFailed, StatusExpired))


def is_successful(status: PaymentStatus) -> bool:
    return isinstance(status, StatusConfirmed)


# Tracked payment


class Payment(BaseModel):
    """A payment being tracked; status and updated_at change as it is polled."""

    id: UUID = Field(default_factory=uuid4, description="Unique payment ID")
    request: PaymentRequest = Field(..., description="What is expected")
    status: PaymentStatus = Field(default_factory=StatusPending)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Caller-owned custom data"
    )

    @field_validator("created_at", "updated_at")
    @classmethod
    def _naive_is_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    def update_status(self, status: PaymentStatus) -> None:
        self.status = status
        self.updated_at = datetime.now(timezone.utc)

    def is_expired(self) -> bool:
        return self.request.is_expired(self.created_at)

    def with_metadata(self, metadata: dict[str, Any]) -> "Payment":
        self.metadata = metadata
        return self
