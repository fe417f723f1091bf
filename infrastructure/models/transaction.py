"""
交易数据库模型 - SQLAlchemy ORM模型
注意：这是基础设施层的实现细节，不是领域模型
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, JSON, Index
from datetime import datetime, timezone

from .base import Base


class TransactionModel(Base):
    """
    交易数据库模型

    所有业务规则都在 domain.payment.entity.Transaction 中
    """
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)

    # 交易引用（回调中的 order 字段）
    transaction_id = Column(String(64), unique=True, index=True, nullable=False, comment="交易引用")
    order_id = Column(String(100), index=True, nullable=False, comment="订单ID")

    provider = Column(String(50), nullable=False, index=True, comment="支付提供商")
    provider_ref = Column(String(200), nullable=True, comment="支付渠道的交易ID")

    amount = Column(Numeric(precision=15, scale=2), nullable=False, comment="交易金额")
    currency = Column(String(3), nullable=False, comment="货币代码 ISO-4217")
    description = Column(Text, nullable=True, comment="交易描述")

    type = Column(String(20), nullable=False, default="payment", comment="交易类型")
    status = Column(String(20), nullable=False, default="pending", index=True, comment="交易状态")

    card_token = Column(JSON, nullable=True, comment="渠道返回的卡令牌")

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    paid_at = Column(DateTime(timezone=True), nullable=True, comment="支付完成时间")

    # 使用 extra_metadata 避免与 SQLAlchemy 的 metadata 冲突
    extra_metadata = Column("metadata", JSON, nullable=True, comment="扩展元数据")

    __table_args__ = (
        Index("ix_transactions_provider_ref", "provider", "provider_ref"),
    )

    def __repr__(self):
        return (
            f"<TransactionModel(id={self.id}, transaction_id='{self.transaction_id}', "
            f"provider='{self.provider}', amount={self.amount}, status='{self.status}')>"
        )
