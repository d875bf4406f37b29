"""
Payment monitor.

Re-runs verification on an interval and reports each distinct status
until the payment is confirmed, failed or expired.
"""

import asyncio
import inspect
from contextlib import aclosing
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Awaitable, Callable, Optional, Union

import structlog

from chainpay.core.config import Settings, get_settings
from chainpay.core.logging import payment_context
from chainpay.errors import PaymentTimeoutError, VerificationFailedError
from chainpay.explorer.client import ExplorerClient
from chainpay.payments.config import MonitorConfig
from chainpay.payments.models import (
    Payment,
    PaymentRequest,
    PaymentStatus,
    StatusConfirmed,
    StatusExpired,
    StatusFailed,
    StatusPending,
    as_utc,
    is_finalized,
    status_from_verdict,
)
from chainpay.payments.verification import PaymentVerifier

logger = structlog.get_logger()

StatusCallback = Callable[[PaymentStatus], Union[None, Awaitable[None]]]


class PaymentMonitor:
    """
    Polls verification for a payment and announces status changes.

    Transitions:
        Pending -> Detected -> Confirmed
        any non-final -> Failed | Expired

    One monitor may watch many payments concurrently; each watch runs its
    own loop against the shared verifier.
    """

    def __init__(
        self,
        verifier: PaymentVerifier,
        config: Optional[MonitorConfig] = None,
    ):
        """
        Initialize the monitor.

        Args:
            verifier: Payment verifier used on every poll
            config: Monitor configuration (defaults to 10s polling)
        """
        self.verifier = verifier
        self.config = config or MonitorConfig()

    @classmethod
    def for_client(
        cls, client: ExplorerClient, poll_interval_seconds: float = 10.0
    ) -> "PaymentMonitor":
        return cls(
            PaymentVerifier(client),
            MonitorConfig(poll_interval_seconds=poll_interval_seconds),
        )

    @classmethod
    def from_settings(
        cls, client: ExplorerClient, settings: Optional[Settings] = None
    ) -> "PaymentMonitor":
        settings = settings or get_settings()
        return cls(PaymentVerifier(client), MonitorConfig.from_settings(settings))

    async def check_status(self, request: PaymentRequest) -> PaymentStatus:
        """Verify once and return the resulting status."""
        verdict = await self.verifier.verify(request)
        return status_from_verdict(verdict)

    async def watch(
        self,
        request: PaymentRequest,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        started_at: Optional[datetime] = None,
    ) -> AsyncIterator[PaymentStatus]:
        """
        Yield each distinct status until the payment is finalized.

        Args:
            request: Payment request to watch
            cancel_event: Stops the loop at its next suspension point when set
            started_at: When the payment was created (defaults to now);
                timeout_seconds counts from here

        Raises:
            Any error from verification; the loop stops on the first one.
        """
        deadline = self._deadline(request, started_at)
        last: Optional[PaymentStatus] = None

        while not self._cancelled(cancel_event):
            status = await self.check_status(request)

            if status != last:
                logger.info("monitor.status_changed", **self._describe(status))
                last = status
                yield status

            if is_finalized(status):
                logger.info("monitor.finalized", status=status.kind)
                return

            if deadline is not None and datetime.now(timezone.utc) >= deadline:
                logger.warning(
                    "monitor.expired", timeout_seconds=request.timeout_seconds
                )
                yield StatusExpired()
                return

            await self._wait(cancel_event)

        logger.info("monitor.cancelled")

    async def monitor(
        self,
        request: PaymentRequest,
        on_status_change: StatusCallback,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        started_at: Optional[datetime] = None,
    ) -> PaymentStatus:
        """
        Poll until the payment is finalized, calling back on every change.

        The callback runs on the polling task, once per distinct status, in
        order. It may be a plain function or a coroutine function.

        Returns:
            The last status reached (the final one unless cancelled)
        """
        final: PaymentStatus = StatusPending()

        with payment_context(
            recipient=request.recipient_address,
            amount=str(request.amount),
            currency=request.currency.kind,
        ):
            logger.info(
                "monitor.started",
                required_confirmations=request.required_confirmations,
                poll_interval_seconds=self.config.poll_interval_seconds,
                timeout_seconds=request.timeout_seconds,
            )
            async with aclosing(
                self.watch(request, cancel_event=cancel_event, started_at=started_at)
            ) as updates:
                async for status in updates:
                    final = status
                    result = on_status_change(status)
                    if inspect.isawaitable(result):
                        await result

        return final

    async def track(
        self,
        payment: Payment,
        on_status_change: Optional[StatusCallback] = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> PaymentStatus:
        """Monitor a tracked payment, keeping its status and updated_at current."""

        async def record(status: PaymentStatus) -> None:
            payment.update_status(status)
            if on_status_change is not None:
                result = on_status_change(status)
                if inspect.isawaitable(result):
                    await result

        return await self.monitor(
            payment.request,
            record,
            cancel_event=cancel_event,
            started_at=payment.created_at,
        )

    async def wait_for_confirmation(self, request: PaymentRequest) -> StatusConfirmed:
        """
        Block until the payment is confirmed.

        Raises:
            PaymentTimeoutError: If the request's timeout elapsed first
            VerificationFailedError: If verification failed
        """
        final = await self.monitor(request, lambda status: None)
        match final:
            case StatusConfirmed():
                return final
            case StatusExpired():
                raise PaymentTimeoutError(request.timeout_seconds or 0)
            case StatusFailed(reason=reason):
                raise VerificationFailedError(reason)
        raise VerificationFailedError(f"monitoring stopped at status '{final.kind}'")

    def _deadline(
        self, request: PaymentRequest, started_at: Optional[datetime]
    ) -> Optional[datetime]:
        if not self.config.enforce_timeout or request.timeout_seconds is None:
            return None
        start = as_utc(started_at) if started_at else datetime.now(timezone.utc)
        return start + timedelta(seconds=request.timeout_seconds)

    @staticmethod
    def _cancelled(cancel_event: Optional[asyncio.Event]) -> bool:
        return cancel_event is not None and cancel_event.is_set()

    async def _wait(self, cancel_event: Optional[asyncio.Event]) -> None:
        interval = self.config.poll_interval_seconds
        if cancel_event is None:
            await asyncio.sleep(interval)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass

    @staticmethod
    def _describe(status: PaymentStatus) -> dict:
        details = status.model_dump()
        details["status"] = details.pop("kind")
        return details
