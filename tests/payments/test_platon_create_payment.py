import base64
import json
from decimal import Decimal

import pytest

from application.dtos.payments import ActionType
from infrastructure.external.payments.platon_client import PUBLIC_URL, format_amount, request_signature


def _data(action) -> dict:
    return json.loads(base64.b64decode(action.data["data"]).decode("utf-8"))


def test_format_amount_rounds_half_up():
    assert format_amount(10) == "10.00"
    assert format_amount(10.005) == "10.01"
    assert format_amount(Decimal("10.004")) == "10.00"
    assert format_amount(Decimal("1234567.5")) == "1234567.50"


@pytest.mark.asyncio
async def test_create_payment_builds_signed_open_action(platon, order, store):
    action = await platon.create_payment(order)

    assert action.type == ActionType.OPEN
    assert action.method == "POST"
    assert action.url == PUBLIC_URL
    assert action.provider == "platon"

    fields = action.data
    assert fields["payment"] == "CC"
    assert fields["url"] == "https://shop.example/return"
    assert fields["lang"] == "en"
    assert fields["email"] == "a@b.com"
    assert fields["first_name"] == "Ann"
    assert fields["last_name"] == "Lee"
    assert fields["phone"] == "+380000000000"
    assert fields["order"] == "123"
    assert fields["key"] == "M1"
    assert fields["sign"] == request_signature("M1", "CC", fields["data"], fields["url"], "P1")
    assert _data(action) == {"amount": "10.00", "currency": "UAH", "description": "Coffee beans"}

    assert len(store.calls) == 1
    _, _, options = store.calls[0]
    assert options["provider"] == "platon"


@pytest.mark.asyncio
async def test_create_payment_rounds_amount(platon, order):
    order.payment.amount = Decimal("10.005")
    action = await platon.create_payment(order)
    assert _data(action)["amount"] == "10.01"


@pytest.mark.asyncio
async def test_description_truncated_without_marker(platon, order):
    order.payment.description = "x" * 300
    action = await platon.create_payment(order)
    assert _data(action)["description"] == "x" * 255


@pytest.mark.asyncio
async def test_recurring_marker_for_card_zero(platon, order):
    order.payment.card_id = 0
    action = await platon.create_payment(order)
    data = _data(action)
    assert data["0"] == "recurring"
    assert "recurring" in data.values()


@pytest.mark.asyncio
@pytest.mark.parametrize("card_id", [None, 5])
async def test_no_recurring_marker_otherwise(platon, order, card_id):
    order.payment.card_id = card_id
    action = await platon.create_payment(order)
    assert "recurring" not in _data(action).values()


@pytest.mark.asyncio
async def test_hook_runs_before_signing(platon, order):
    seen = []

    def hook(payment, provider):
        seen.append(provider)
        payment.description = "Changed by hook"
        payment.return_url = "https://shop.example/other"

    action = await platon.create_payment(order, hook)

    assert seen == [platon]
    assert _data(action)["description"] == "Changed by hook"
    assert action.data["url"] == "https://shop.example/other"
    assert action.data["sign"] == request_signature("M1", "CC", action.data["data"], "https://shop.example/other", "P1")


@pytest.mark.asyncio
async def test_store_failure_propagates(platon, order, store, processor):
    store.error = RuntimeError("database unavailable")
    with pytest.raises(RuntimeError, match="database unavailable"):
        await platon.create_payment(order)
    assert processor.invoices == []


@pytest.mark.asyncio
async def test_configured_endpoint_is_used(store, processor, order):
    from infrastructure.external.payments.platon_client import PlatonPaymentProvider

    gw = PlatonPaymentProvider(
        {"merchant": "M1", "password": "P1", "endpoint": "https://sandbox.example/payment/auth"},
        transactions=store,
        processor=processor,
    )
    action = await gw.create_payment(order)
    assert action.url == "https://sandbox.example/payment/auth"
