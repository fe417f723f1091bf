"""
Registry of payment providers keyed by provider name.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from core.settings import payment_settings
from application.ports.payment_gateway import (
    PaymentProvider,
    TransactionProcessor,
    TransactionStore,
)
from infrastructure.external.payments.exceptions import PaymentProviderNotFound


def _platon():
    from .platon_client import PlatonPaymentProvider
    return PlatonPaymentProvider


_PROVIDERS = {
    "platon": _platon,
}


def provider_names() -> list[str]:
    return sorted(_PROVIDERS)


def get_payment_provider(
    provider: Optional[str] = None,
    *,
    transactions: TransactionStore,
    processor: TransactionProcessor,
    config: Optional[Mapping[str, Any]] = None,
) -> PaymentProvider:
    name = (provider or payment_settings.default_provider).lower()
    factory = _PROVIDERS.get(name)
    if factory is None:
        raise PaymentProviderNotFound(name)
    cls = factory()
    if config is None:
        config = payment_settings.provider_config(name)
    return cls(config, transactions=transactions, processor=processor)


def list_payment_providers(*, transactions: TransactionStore, processor: TransactionProcessor) -> list[str]:
    """Names of the providers whose configuration is complete."""
    return [
        name
        for name in provider_names()
        if get_payment_provider(name, transactions=transactions, processor=processor).is_valid()
    ]
