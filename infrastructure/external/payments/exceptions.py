"""
Exceptions for payment providers mapped to unified BusinessException variants.
"""
from __future__ import annotations

from typing import Optional
from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import PaymentCode


class PaymentProviderNotFound(BusinessException):
    def __init__(self, provider: str):
        super().__init__(
            code=PaymentCode.PROVIDER_NOT_FOUND,
            message=f"Unsupported payment provider: {provider}",
            error_type="PaymentProviderNotFound",
            details={"provider": provider},
        )


class PaymentProviderMisconfigured(BusinessException):
    def __init__(self, provider: str):
        super().__init__(
            code=PaymentCode.PROVIDER_MISCONFIGURED,
            message=f"Payment provider {provider} is not configured",
            error_type="PaymentProviderMisconfigured",
            details={"provider": provider},
        )
