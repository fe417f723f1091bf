"""
交易仓储实现 - 使用SQLAlchemy实现数据访问
"""
from typing import Optional
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging_config import get_logger
from domain.payment.entity import Transaction, TransactionStatus, TransactionType
from domain.payment.repository import TransactionRepository
from domain.payment.service import TransactionAlreadyExistsException, TransactionNotFoundException
from infrastructure.models.transaction import TransactionModel


logger = get_logger(__name__)


class SQLAlchemyTransactionRepository(TransactionRepository):
    """交易仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: TransactionModel) -> Transaction:
        """将数据库模型转换为领域实体"""
        return Transaction(
            id=model.id,
            transaction_id=model.transaction_id,
            provider=model.provider,
            order_id=model.order_id,
            amount=Decimal(str(model.amount)),
            currency=model.currency,
            status=TransactionStatus(model.status),
            type=TransactionType(model.type),
            description=model.description,
            provider_ref=model.provider_ref,
            card_token=model.card_token,
            created_at=model.created_at,
            updated_at=model.updated_at,
            paid_at=model.paid_at,
            metadata=model.extra_metadata or {},
        )

    def _apply(self, model: TransactionModel, entity: Transaction) -> None:
        model.transaction_id = entity.transaction_id
        model.provider = entity.provider
        model.order_id = entity.order_id
        model.amount = entity.amount
        model.currency = entity.currency
        model.status = entity.status.value
        model.type = entity.type.value
        model.description = entity.description
        model.provider_ref = entity.provider_ref
        model.card_token = entity.card_token
        model.paid_at = entity.paid_at
        model.extra_metadata = entity.metadata
        if entity.created_at is not None:
            model.created_at = entity.created_at
        if entity.updated_at is not None:
            model.updated_at = entity.updated_at

    async def _get_model(self, transaction_id: str) -> Optional[TransactionModel]:
        result = await self.session.execute(
            select(TransactionModel).where(TransactionModel.transaction_id == transaction_id)
        )
        return result.scalar_one_or_none()

    async def create(self, transaction: Transaction) -> Transaction:
        """创建交易记录"""
        db_transaction = TransactionModel()
        self._apply(db_transaction, transaction)
        self.session.add(db_transaction)
        try:
            await self.session.flush()
        except IntegrityError:
            logger.warning("transaction_create_conflict", transaction_id=transaction.transaction_id)
            raise TransactionAlreadyExistsException(transaction.transaction_id)
        await self.session.refresh(db_transaction)
        return self._to_entity(db_transaction)

    async def get_by_transaction_id(self, transaction_id: str) -> Optional[Transaction]:
        """根据交易引用获取交易"""
        db_transaction = await self._get_model(transaction_id)
        return self._to_entity(db_transaction) if db_transaction else None

    async def update(self, transaction: Transaction) -> Transaction:
        """更新交易记录"""
        db_transaction = await self._get_model(transaction.transaction_id)
        if db_transaction is None:
            raise TransactionNotFoundException(transaction.transaction_id)
        self._apply(db_transaction, transaction)
        await self.session.flush()
        await self.session.refresh(db_transaction)
        logger.info(
            "transaction_updated",
            transaction_id=db_transaction.transaction_id,
            status=db_transaction.status,
        )
        return self._to_entity(db_transaction)
