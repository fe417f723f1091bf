"""
交易领域异常
"""
from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import PaymentCode


class TransactionAlreadyExistsException(BusinessException):
    """交易引用冲突"""
    def __init__(self, transaction_id: str):
        super().__init__(
            code=PaymentCode.TRANSACTION_STATE_ERROR,
            message=f"Transaction {transaction_id} already exists",
            error_type="TransactionAlreadyExists",
            details={"transaction_id": transaction_id},
        )


class TransactionNotFoundException(BusinessException):
    """交易记录不存在"""
    def __init__(self, transaction_id: str):
        super().__init__(
            code=PaymentCode.TRANSACTION_NOT_FOUND,
            message=f"Transaction not found: {transaction_id}",
            error_type="TransactionNotFound",
            details={"transaction_id": transaction_id},
        )


class TransactionProviderMismatchException(BusinessException):
    """回调来源与交易渠道不一致"""
    def __init__(self, transaction_id: str, expected: str, actual: str):
        super().__init__(
            code=PaymentCode.TRANSACTION_STATE_ERROR,
            message=f"Transaction {transaction_id} belongs to provider {expected}, not {actual}",
            error_type="TransactionProviderMismatch",
            details={"transaction_id": transaction_id, "expected": expected, "actual": actual},
        )
