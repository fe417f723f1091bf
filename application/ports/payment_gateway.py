"""
Payment provider port (application/ports) exposing a replaceable protocol.

Application depends on these Protocols; infrastructure implements adapters.
The provider consumes a transaction store and a transaction processor, both
supplied by the host at construction time.
"""
from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from starlette.requests import Request
from starlette.responses import Response

from application.dtos.payments import Action, Invoice, Order, PaymentDetails
from domain.payment.entity import Transaction


@runtime_checkable
class TransactionStore(Protocol):
    """Creates the transaction record an outbound payment request refers to."""

    async def create_transaction(
        self,
        order: Order,
        payment: PaymentDetails,
        options: Optional[dict[str, Any]] = None,
    ) -> Transaction: ...


@runtime_checkable
class TransactionProcessor(Protocol):
    """Applies an Invoice reported by a provider; owns idempotency and ordering."""

    async def process(self, invoice: Invoice) -> Any: ...


@runtime_checkable
class PaymentProvider(Protocol):
    """Gateway protocol for third-party payment providers."""

    provider: str

    def get_provider_name(self) -> str: ...

    async def create_payment(
        self,
        order: Order,
        callback: Optional["PreSignHook"] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> Action: ...

    async def callback(self, request: Request) -> Response: ...

    def is_valid(self) -> bool: ...

    def sign(self, data: dict[str, Any]) -> dict[str, Any]: ...


# Runs synchronously before signing, for side effects on the payment only
PreSignHook = Callable[[PaymentDetails, PaymentProvider], None]
