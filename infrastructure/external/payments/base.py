"""
Base payment provider implementing shared concerns: configuration access,
transaction creation, invoice hand-off, status mapping and logging.

Concrete providers subclass and implement the gateway protocol.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from starlette.requests import Request
from starlette.responses import Response

from application.dtos.payments import Action, Invoice, Order, PaymentDetails
from application.ports.payment_gateway import (
    PaymentProvider,
    PreSignHook,
    TransactionProcessor,
    TransactionStore,
)
from core.logging_config import get_logger
from domain.payment.entity import Transaction, TransactionStatus
from shared.codes.payment_codes import PROVIDER_STATUS_TO_INTERNAL


logger = get_logger(__name__)


class BasePaymentProvider(PaymentProvider):
    provider: str = "base"

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        *,
        transactions: TransactionStore,
        processor: TransactionProcessor,
    ) -> None:
        self._config = dict(config or {})
        self._transactions = transactions
        self._processor = processor

    def get_provider_name(self) -> str:
        return self.provider

    def config(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    # Default implementations raise to force override where needed
    async def create_payment(
        self,
        order: Order,
        callback: Optional[PreSignHook] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> Action:  # type: ignore[override]
        raise NotImplementedError

    async def callback(self, request: Request) -> Response:  # type: ignore[override]
        raise NotImplementedError

    def is_valid(self) -> bool:  # type: ignore[override]
        raise NotImplementedError

    def sign(self, data: dict[str, Any]) -> dict[str, Any]:  # type: ignore[override]
        raise NotImplementedError

    # Helpers
    async def make_transaction(
        self,
        order: Order,
        payment: PaymentDetails,
        options: Optional[dict[str, Any]] = None,
    ) -> Transaction:
        transaction = await self._transactions.create_transaction(
            order, payment, {**(options or {}), "provider": self.provider}
        )
        self._log("transaction_made", order_id=order.order_id, transaction_id=transaction.transaction_id)
        return transaction

    async def process(self, invoice: Invoice) -> Any:
        self._log(
            "invoice_dispatched",
            transaction_id=invoice.transaction_id,
            provider_ref=invoice.provider_ref,
            status=invoice.status.value,
        )
        return await self._processor.process(invoice)

    def _map_status(self, provider_status: str) -> Optional[TransactionStatus]:
        mapping = PROVIDER_STATUS_TO_INTERNAL.get(self.provider, {})
        internal = mapping.get(provider_status)
        return TransactionStatus(internal) if internal is not None else None

    def _log(self, event: str, *, level: str = "info", **kwargs) -> None:
        getattr(logger, level)(
            event,
            provider=self.provider,
            **kwargs,
        )
