"""
交易领域实体 - 交易聚合根

A transaction is created for every outbound payment request; its
``transaction_id`` is the reference the gateway echoes back in callbacks.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from domain.common.exceptions import DomainValidationException


class TransactionStatus(str, Enum):
    """交易状态枚举"""
    PENDING = "pending"          # 待支付
    SUCCESSFUL = "successful"    # 支付成功
    FAILED = "failed"            # 支付失败
    CANCELED = "canceled"        # 已取消
    REFUND = "refund"            # 已退款（含拒付）


class TransactionType(str, Enum):
    PAYMENT = "payment"


# Allowed transitions; applying the current status again is handled separately.
_TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset({
        TransactionStatus.SUCCESSFUL,
        TransactionStatus.FAILED,
        TransactionStatus.CANCELED,
    }),
    TransactionStatus.FAILED: frozenset({TransactionStatus.SUCCESSFUL}),
    TransactionStatus.SUCCESSFUL: frozenset({TransactionStatus.REFUND}),
    TransactionStatus.CANCELED: frozenset(),
    TransactionStatus.REFUND: frozenset(),
}


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """确保时间为 UTC 时区"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class Transaction:
    """
    交易聚合根 - 管理单笔支付交易的生命周期

    业务规则：
    1. transaction_id 全局唯一，作为网关回调中的订单引用
    2. 金额必须大于0
    3. 状态转换必须遵循状态机
    4. 重复应用当前状态为幂等操作
    """

    id: Optional[int]
    transaction_id: str
    provider: str
    order_id: str
    amount: Decimal
    currency: str
    status: TransactionStatus = TransactionStatus.PENDING
    type: TransactionType = TransactionType.PAYMENT
    description: Optional[str] = None
    provider_ref: Optional[str] = None
    card_token: Optional[dict[str, Any]] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.amount <= 0:
            raise DomainValidationException(
                f"Transaction amount must be positive: {self.amount}",
                field="amount",
            )
        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha():
            raise DomainValidationException(
                f"Invalid currency code: {self.currency}",
                field="currency",
            )
        self.created_at = _ensure_utc(self.created_at)
        self.updated_at = _ensure_utc(self.updated_at)
        self.paid_at = _ensure_utc(self.paid_at)
        if self.metadata is None:
            self.metadata = {}

    def can_transition(self, status: TransactionStatus) -> bool:
        return status in _TRANSITIONS[self.status]

    def apply_status(self, status: TransactionStatus, *, provider_ref: Optional[str] = None) -> bool:
        """
        应用网关回报的状态

        Returns False when the transaction already has ``status`` (duplicate
        delivery), True when the status changed.
        """
        if status == self.status:
            return False
        if not self.can_transition(status):
            raise DomainValidationException(
                f"Cannot change transaction status from {self.status.value} to {status.value}",
                field="status",
                details={"transaction_id": self.transaction_id, "from": self.status.value, "to": status.value},
            )
        now = datetime.now(timezone.utc)
        self.status = status
        if provider_ref:
            self.provider_ref = provider_ref
        if status == TransactionStatus.SUCCESSFUL:
            self.paid_at = now
        self.updated_at = now
        return True

    def attach_card(self, card: dict[str, Any]) -> None:
        self.card_token = dict(card)
        self.updated_at = datetime.now(timezone.utc)

    def is_final_status(self) -> bool:
        return not _TRANSITIONS[self.status]
