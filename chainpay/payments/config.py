"""Configuration for payment verification and monitoring.

Amount acceptance runs in two stages:

1. While scanning recent transfers, the first one worth at least
   ``match_min_percent`` of the requested amount becomes the candidate.
   No candidate -> NotFound.
2. The candidate is re-checked against ``accept_min_percent``. Failing
   that -> Failed("Amount mismatch ..."), so a short payment is reported
   as such rather than as missing.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, model_validator

if TYPE_CHECKING:
    from chainpay.core.config import Settings


class VerificationConfig(BaseModel):
    """Configuration for matching transfers against a payment request."""

    match_min_percent: Decimal = Field(
        default=Decimal("99.9"),
        ge=0,
        le=100,
        description="Minimum percent of the amount for a transfer to be a candidate",
    )
    accept_min_percent: Decimal = Field(
        default=Decimal("99.95"),
        ge=0,
        le=100,
        description="Minimum percent of the amount for a candidate to be accepted",
    )
    page_size: int = Field(
        default=100, ge=1, le=10000, description="Recent transfers fetched per check"
    )

    @model_validator(mode="after")
    def _check_order(self) -> "VerificationConfig":
        if self.accept_min_percent < self.match_min_percent:
            raise ValueError("accept_min_percent must be >= match_min_percent")
        return self


class MonitorConfig(BaseModel):
    """Configuration for the payment polling loop."""

    poll_interval_seconds: float = Field(
        default=10.0, gt=0, description="Seconds between verification polls"
    )
    enforce_timeout: bool = Field(
        default=True,
        description="Emit Expired once the request's timeout_seconds has elapsed",
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> "MonitorConfig":
        return cls(poll_interval_seconds=settings.PAYMENT_POLL_INTERVAL)
