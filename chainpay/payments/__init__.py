"""Payment verification and monitoring module exports."""

from chainpay.payments.config import MonitorConfig, VerificationConfig

from chainpay.payments.models import (
    NATIVE,
    Currency,
    NativeCurrency,
    TokenCurrency,
    PaymentRequest,
    Payment,
    VerificationVerdict,
    VerdictNotFound,
    VerdictPending,
    VerdictConfirmed,
    VerdictFailed,
    PaymentStatus,
    StatusPending,
    StatusDetected,
    StatusConfirmed,
    StatusFailed,
    StatusExpired,
    is_finalized,
    is_successful,
    status_from_verdict,
    dai,
    usdc,
    usdt,
)

from chainpay.payments.verification import PaymentVerifier
from chainpay.payments.monitor import PaymentMonitor

__all__ = [
    # Config
    "MonitorConfig",
    "VerificationConfig",
    # Currency
    "NATIVE",
    "Currency",
    "NativeCurrency",
    "TokenCurrency",
    "dai",
    "usdc",
    "usdt",
    # Requests and records
    "PaymentRequest",
    "Payment",
    # Verdicts
    "VerificationVerdict",
    "VerdictNotFound",
    "VerdictPending",
    "VerdictConfirmed",
    "VerdictFailed",
    # Status
    "PaymentStatus",
    "StatusPending",
    "StatusDetected",
    "StatusConfirmed",
    "StatusFailed",
    "StatusExpired",
    "is_finalized",
    "is_successful",
    "status_from_verdict",
    # Engine
    "PaymentVerifier",
    "PaymentMonitor",
]
