"""Payment verification: match recent transfers against a payment request."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import structlog

from chainpay.amounts import amount_sufficient, is_valid_address, is_valid_tx_hash
from chainpay.errors import (
    AmountMismatchError,
    InsufficientConfirmationsError,
    InvalidAddressError,
    InvalidTxHashError,
    RecipientMismatchError,
    TokenMismatchError,
    TransactionNotFoundError,
    VerificationFailedError,
)
from chainpay.explorer.client import ExplorerClient
from chainpay.explorer.models import TokenTransfer, Transaction
from chainpay.payments.config import VerificationConfig
from chainpay.payments.models import (
    NativeCurrency,
    PaymentRequest,
    TokenCurrency,
    VerdictConfirmed,
    VerdictFailed,
    VerdictNotFound,
    VerdictPending,
    VerificationVerdict,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class Candidate:
    """A transfer that plausibly pays a request."""

    tx_hash: str
    confirmations: int
    amount: Decimal


class PaymentVerifier:
    """
    Decides whether a payment request has been paid.

    Flow:
    1. Validate the recipient address
    2. Fetch the most recent transfers involving the recipient, keep incoming ones
    3. Take the first transfer (API order, newest first) that covers the amount
    4. Re-check the amount strictly, then compare confirmations
    """

    def __init__(
        self,
        client: ExplorerClient,
        config: VerificationConfig | None = None,
    ):
        """
        Initialize verifier.

        Args:
            client: Explorer client (shared pipeline)
            config: Verification configuration
        """
        self.client = client
        self.config = config or VerificationConfig()

    async def verify(self, request: PaymentRequest) -> VerificationVerdict:
        """
        Verify a payment request.

        Args:
            request: Payment request to check

        Returns:
            Verification verdict

        Raises:
            InvalidAddressError: If the recipient address is malformed
        """
        if not is_valid_address(request.recipient_address):
            raise InvalidAddressError(request.recipient_address)

        candidate = await self._find_candidate(request)
        if candidate is None:
            logger.info(
                "verify.no_candidate",
                recipient=request.recipient_address,
                amount=str(request.amount),
            )
            return VerdictNotFound()

        logger.info(
            "verify.candidate",
            tx_hash=candidate.tx_hash,
            recipient=request.recipient_address,
            amount=str(request.amount),
            received=str(candidate.amount),
            confirmations=candidate.confirmations,
            required_confirmations=request.required_confirmations,
        )

        if not amount_sufficient(
            request.amount, candidate.amount, self.config.accept_min_percent
        ):
            return VerdictFailed(
                reason=(
                    f"Amount mismatch: expected {request.amount}, "
                    f"got {candidate.amount}"
                )
            )

        return self._confirmation_verdict(request, candidate)

    async def _find_candidate(self, request: PaymentRequest) -> Optional[Candidate]:
        match request.currency:
            case NativeCurrency():
                transactions = await self.client.get_transactions(
                    request.recipient_address, offset=self.config.page_size
                )
                return self._scan_transactions(request, transactions)
            case TokenCurrency(contract_address=contract_address, decimals=decimals):
                transfers = await self.client.get_token_transfers(
                    request.recipient_address,
                    contract_address=contract_address,
                    offset=self.config.page_size,
                )
                return self._scan_transfers(request, transfers, decimals)
        raise TypeError(f"Unsupported currency: {request.currency!r}")

    def _scan_transactions(
        self, request: PaymentRequest, transactions: list[Transaction]
    ) -> Optional[Candidate]:
        recipient = request.recipient_address.lower()
        for tx in transactions:
            if tx.to.lower() != recipient or not tx.is_successful():
                continue
            value = tx.value_native
            if amount_sufficient(request.amount, value, self.config.match_min_percent):
                return Candidate(tx.hash, tx.confirmation_count, value)
        return None

    def _scan_transfers(
        self,
        request: PaymentRequest,
        transfers: list[TokenTransfer],
        decimals: int,
    ) -> Optional[Candidate]:
        recipient = request.recipient_address.lower()
        for transfer in transfers:
            if transfer.to.lower() != recipient:
                continue
            value = transfer.value_in(decimals)
            if amount_sufficient(request.amount, value, self.config.match_min_percent):
                return Candidate(transfer.hash, transfer.confirmation_count, value)
        return None

    @staticmethod
    def _confirmation_verdict(
        request: PaymentRequest, candidate: Candidate
    ) -> VerificationVerdict:
        if candidate.confirmations >= request.required_confirmations:
            return VerdictConfirmed(
                tx_hash=candidate.tx_hash, confirmations=candidate.confirmations
            )
        return VerdictPending(
            tx_hash=candidate.tx_hash, confirmations=candidate.confirmations
        )

    async def find_matching_transaction(self, request: PaymentRequest) -> Optional[str]:
        """Return the hash of the matching transaction, if any."""
        match await self.verify(request):
            case VerdictConfirmed(tx_hash=tx_hash) | VerdictPending(tx_hash=tx_hash):
                return tx_hash
        return None

    async def check_confirmations(self, tx_hash: str) -> int:
        """
        Current confirmation count for a transaction hash.

        Raises:
            InvalidTxHashError: If the hash is malformed
        """
        if not is_valid_tx_hash(tx_hash):
            raise InvalidTxHashError(tx_hash)
        return await self.client.get_confirmations(tx_hash)

    async def verify_transaction(
        self, request: PaymentRequest, tx_hash: str
    ) -> VerificationVerdict:
        """
        Verify a specific transaction the payer claims to have sent.

        The transaction is looked up in the recipient's recent history.

        Args:
            request: Payment request
            tx_hash: Transaction hash supplied by the payer

        Returns:
            NotFound if the hash is not in recent history, Failed if the
            transaction reverted, otherwise Pending or Confirmed

        Raises:
            InvalidAddressError: If the recipient address is malformed
            InvalidTxHashError: If the hash is malformed
            RecipientMismatchError: If the transaction pays someone else
            TokenMismatchError: If a different token was transferred
            AmountMismatchError: If the amount is short
        """
        if not is_valid_address(request.recipient_address):
            raise InvalidAddressError(request.recipient_address)
        if not is_valid_tx_hash(tx_hash):
            raise InvalidTxHashError(tx_hash)

        recipient = request.recipient_address.lower()
        wanted = tx_hash.lower()

        match request.currency:
            case NativeCurrency():
                transactions = await self.client.get_transactions(
                    request.recipient_address, offset=self.config.page_size
                )
                tx = next((t for t in transactions if t.hash.lower() == wanted), None)
                if tx is None:
                    return VerdictNotFound()
                if tx.to.lower() != recipient:
                    raise RecipientMismatchError(request.recipient_address, tx.to)
                if not tx.is_successful():
                    return VerdictFailed(reason="Transaction reverted")
                candidate = Candidate(tx.hash, tx.confirmation_count, tx.value_native)

            case TokenCurrency(contract_address=contract_address, decimals=decimals):
                transfers = await self.client.get_token_transfers(
                    request.recipient_address, offset=self.config.page_size
                )
                matches = [t for t in transfers if t.hash.lower() == wanted]
                if not matches:
                    return VerdictNotFound()
                incoming = [t for t in matches if t.to.lower() == recipient]
                if not incoming:
                    raise RecipientMismatchError(
                        request.recipient_address, matches[0].to
                    )
                same_token = [
                    t
                    for t in incoming
                    if t.contract_address.lower() == contract_address.lower()
                ]
                if not same_token:
                    raise TokenMismatchError(
                        contract_address, incoming[0].contract_address
                    )
                transfer = same_token[0]
                candidate = Candidate(
                    transfer.hash,
                    transfer.confirmation_count,
                    transfer.value_in(decimals),
                )

            case _:
                raise TypeError(f"Unsupported currency: {request.currency!r}")

        if not amount_sufficient(
            request.amount, candidate.amount, self.config.accept_min_percent
        ):
            raise AmountMismatchError(request.amount, candidate.amount)

        return self._confirmation_verdict(request, candidate)

    async def require_confirmed(self, request: PaymentRequest) -> VerdictConfirmed:
        """
        Verify and insist on a confirmed payment.

        Raises:
            TransactionNotFoundError: If no matching transfer exists
            InsufficientConfirmationsError: If the transfer is not deep enough yet
            VerificationFailedError: If verification failed
        """
        verdict = await self.verify(request)
        match verdict:
            case VerdictConfirmed():
                return verdict
            case VerdictPending(confirmations=confirmations):
                raise InsufficientConfirmationsError(
                    confirmations, request.required_confirmations
                )
            case VerdictFailed(reason=reason):
                raise VerificationFailedError(reason)
            case VerdictNotFound():
                raise TransactionNotFoundError(
                    f"no payment of {request.amount} to {request.recipient_address}"
                )
        raise TypeError(f"Unsupported verdict: {verdict!r}")
