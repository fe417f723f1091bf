"""
Application service for the host side of a payment: creating the transaction
an outbound request refers to, and applying invoices reported by providers.

It implements both the TransactionStore and TransactionProcessor ports and
depends only on the unit of work abstraction; the SQLAlchemy implementation is
injected from the composition root (API dependencies).
"""
from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, Callable, Optional

from application.dtos.payments import Invoice, Order, PaymentDetails
from core.logging_config import get_logger
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.payment.entity import Transaction, TransactionStatus, TransactionType
from domain.payment.service import (
    TransactionNotFoundException,
    TransactionProviderMismatchException,
)


logger = get_logger(__name__)


def new_transaction_id() -> str:
    return uuid.uuid4().hex


class TransactionService:
    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def create_transaction(
        self,
        order: Order,
        payment: PaymentDetails,
        options: Optional[dict[str, Any]] = None,
    ) -> Transaction:
        options = dict(options or {})
        provider = options.pop("provider", None) or "unknown"
        transaction = Transaction(
            id=None,
            transaction_id=new_transaction_id(),
            provider=provider,
            order_id=order.order_id,
            amount=Decimal(payment.amount),
            currency=payment.currency,
            description=payment.description,
            status=TransactionStatus.PENDING,
            type=TransactionType.PAYMENT,
            metadata={**payment.metadata, **options},
        )
        async with self._uow_factory() as uow:
            created = await uow.transaction_repository.create(transaction)
            await uow.commit()
        logger.info(
            "transaction_created",
            transaction_id=created.transaction_id,
            order_id=created.order_id,
            provider=created.provider,
            amount=str(created.amount),
        )
        return created

    async def process(self, invoice: Invoice) -> Transaction:
        async with self._uow_factory() as uow:
            transaction = await uow.transaction_repository.get_by_transaction_id(invoice.transaction_id)
            if transaction is None:
                raise TransactionNotFoundException(invoice.transaction_id)
            if transaction.provider != invoice.provider:
                raise TransactionProviderMismatchException(
                    invoice.transaction_id, transaction.provider, invoice.provider
                )

            changed = transaction.apply_status(invoice.status, provider_ref=invoice.provider_ref)
            if invoice.card is not None and invoice.card.model_dump() != transaction.card_token:
                transaction.attach_card(invoice.card.model_dump())
                changed = True
            if not changed:
                logger.info(
                    "invoice_duplicate_ignored",
                    transaction_id=transaction.transaction_id,
                    provider=invoice.provider,
                    status=invoice.status.value,
                )
                return transaction

            if invoice.amount != transaction.amount:
                logger.warning(
                    "invoice_amount_mismatch",
                    transaction_id=transaction.transaction_id,
                    expected=str(transaction.amount),
                    reported=str(invoice.amount),
                )
            updated = await uow.transaction_repository.update(transaction)
            await uow.commit()

        logger.info(
            "invoice_processed",
            transaction_id=updated.transaction_id,
            provider=invoice.provider,
            provider_ref=invoice.provider_ref,
            status=updated.status.value,
        )
        return updated
