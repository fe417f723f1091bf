import json
from decimal import Decimal
from urllib.parse import urlencode

import pytest

from domain.payment.entity import TransactionStatus
from infrastructure.external.payments.platon_client import callback_signature


CARD = "411111xxxxxx1111"


def _fields(**overrides) -> dict:
    fields = {
        "id": "38590-9431-1",
        "order": "123",
        "status": "SALE",
        "amount": "10.00",
        "email": "a@b.com",
        "card": CARD,
    }
    fields.update(overrides)
    fields.setdefault("sign", callback_signature(fields.get("email"), "P1", fields["order"], fields.get("card")))
    return fields


def _form(fields: dict) -> bytes:
    return urlencode(fields).encode()


@pytest.mark.asyncio
async def test_sale_is_processed_once(platon, processor, request_factory):
    response = await platon.callback(request_factory(_form(_fields())))

    assert response.status_code == 200
    assert response.body == b""
    assert len(processor.invoices) == 1
    invoice = processor.invoices[0]
    assert invoice.status == TransactionStatus.SUCCESSFUL
    assert invoice.provider == "platon"
    assert invoice.provider_ref == "38590-9431-1"
    assert invoice.transaction_id == "123"
    assert invoice.amount == Decimal("10.00")
    assert invoice.type.value == "payment"
    assert invoice.card is None


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["REFUND", "CHARGEBACK"])
async def test_refund_statuses_map_to_refund(platon, processor, request_factory, status):
    response = await platon.callback(request_factory(_form(_fields(status=status))))
    assert response.status_code == 200
    assert processor.invoices[0].status == TransactionStatus.REFUND


@pytest.mark.asyncio
async def test_missing_amount_is_rejected(platon, processor, request_factory):
    fields = _fields()
    fields.pop("amount")
    response = await platon.callback(request_factory(_form(fields)))

    assert response.status_code == 400
    body = json.loads(response.body)
    assert "amount" in body["errors"]
    assert body["errors"]["amount"] == ["The amount field is required."]
    assert body["message"]
    assert processor.invoices == []


@pytest.mark.asyncio
async def test_empty_required_field_is_rejected(platon, processor, request_factory):
    response = await platon.callback(request_factory(_form(_fields(status=""))))
    assert response.status_code == 400
    assert list(json.loads(response.body)["errors"]) == ["status"]
    assert processor.invoices == []


@pytest.mark.asyncio
async def test_non_numeric_amount_is_rejected(platon, processor, request_factory):
    response = await platon.callback(request_factory(_form(_fields(amount="ten"))))
    assert response.status_code == 400
    assert json.loads(response.body)["errors"]["amount"] == ["The amount must be a number."]
    assert processor.invoices == []


@pytest.mark.asyncio
async def test_wrong_signature_is_forbidden(platon, processor, request_factory):
    response = await platon.callback(request_factory(_form(_fields(sign="0" * 32))))

    assert response.status_code == 403
    assert json.loads(response.body) == {"message": "Invalid signature"}
    assert processor.invoices == []


@pytest.mark.asyncio
async def test_signature_from_other_password_is_forbidden(platon, processor, request_factory):
    sign = callback_signature("a@b.com", "other", "123", CARD)
    response = await platon.callback(request_factory(_form(_fields(sign=sign))))
    assert response.status_code == 403
    assert processor.invoices == []


@pytest.mark.asyncio
async def test_unknown_status_is_acknowledged_without_processing(platon, processor, request_factory):
    response = await platon.callback(request_factory(_form(_fields(status="UNKNOWN_STATUS"))))
    assert response.status_code == 200
    assert processor.invoices == []


@pytest.mark.asyncio
async def test_card_token_attached_when_tokenized(platon, processor, request_factory):
    fields = _fields(rc_token="tok_abc", rc_id="rc-42")
    response = await platon.callback(request_factory(_form(fields)))

    assert response.status_code == 200
    card = processor.invoices[0].card
    assert card.card == CARD
    assert card.token == "tok_abc"
    assert card.data == {"rc_id": "rc-42"}


@pytest.mark.asyncio
async def test_json_body_with_numeric_amount(platon, processor, request_factory):
    fields = _fields()
    fields["amount"] = 10.5
    body = json.dumps(fields).encode()
    response = await platon.callback(request_factory(body, content_type="application/json"))

    assert response.status_code == 200
    assert processor.invoices[0].amount == Decimal("10.5")


@pytest.mark.asyncio
async def test_malformed_json_is_a_validation_error(platon, processor, request_factory):
    response = await platon.callback(request_factory(b"{not json", content_type="application/json"))
    assert response.status_code == 400
    errors = json.loads(response.body)["errors"]
    assert set(errors) == {"sign", "status", "id", "order", "amount"}
    assert processor.invoices == []


@pytest.mark.asyncio
async def test_callback_without_email_or_card(platon, processor, request_factory):
    fields = _fields()
    fields.pop("email")
    fields.pop("card")
    fields["sign"] = callback_signature(None, "P1", "123", None)
    response = await platon.callback(request_factory(_form(fields)))
    assert response.status_code == 200
    assert len(processor.invoices) == 1
