"""
API依赖项 - 组合根：为路由装配应用服务与支付渠道
"""
from fastapi import Depends

from application.ports.payment_gateway import PaymentProvider
from application.services.payment_service import TransactionService
from infrastructure.external.payments import get_payment_provider
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


async def get_transaction_service() -> TransactionService:
    return TransactionService(uow_factory=SQLAlchemyUnitOfWork)


async def get_provider(
    provider: str,
    service: TransactionService = Depends(get_transaction_service),
) -> PaymentProvider:
    return get_payment_provider(provider, transactions=service, processor=service)
