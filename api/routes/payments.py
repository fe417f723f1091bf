"""
Payments API routes.

Exposes provider callbacks and a minimal endpoint to start a payment. Keep
this thin: gateway protocol details stay in the provider adapters.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from api.dependencies import get_provider, get_transaction_service
from application.dtos.payments import Order
from application.ports.payment_gateway import PaymentProvider
from application.services.payment_service import TransactionService
from core.logging_config import get_logger
from core.response import success_response
from infrastructure.external.payments import list_payment_providers
from infrastructure.external.payments.exceptions import PaymentProviderMisconfigured


router = APIRouter(prefix="/payments", tags=["Payments"])
logger = get_logger(__name__)


@router.get("/providers", summary="List configured payment providers")
async def providers(service: TransactionService = Depends(get_transaction_service)):
    names = list_payment_providers(transactions=service, processor=service)
    return success_response(data={"providers": names})


@router.post("/{provider}/callback", summary="Provider callback", response_class=Response)
async def payments_callback(request: Request, gateway: PaymentProvider = Depends(get_provider)):
    # The provider answers in its own format; no envelope here
    return await gateway.callback(request)


@router.post("/{provider}/orders", summary="Create payment", response_model=None)
async def create_payment(payload: Order, gateway: PaymentProvider = Depends(get_provider)):
    if not gateway.is_valid():
        raise PaymentProviderMisconfigured(gateway.get_provider_name())
    action = await gateway.create_payment(payload, options={"source": "api"})
    logger.info("payment_created", provider=gateway.get_provider_name(), order_id=payload.order_id)
    return success_response(data=action.model_dump(mode="json"), message="Payment created")
