"""
Payment specific codes and provider status mapping.
"""
from __future__ import annotations

from enum import IntEnum
from types import MappingProxyType


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Provider/Network errors (6xxxx)
    PROVIDER_NOT_FOUND = 60005
    PROVIDER_MISCONFIGURED = 60006

    # Transaction errors (61xxx)
    TRANSACTION_NOT_FOUND = 61000
    TRANSACTION_STATE_ERROR = 61001


# Provider -> internal transaction status. Read-only; statuses missing from a
# provider table are not transitions.
PROVIDER_STATUS_TO_INTERNAL = MappingProxyType({
    "platon": MappingProxyType({
        "SALE": "successful",
        "REFUND": "refund",
        "CHARGEBACK": "refund",
    }),
})
