"""
Platon (platononline.com) adapter.

Outbound payments are browser redirects: the adapter builds a signed form that
the client POSTs to the gateway. The gateway reports the outcome with a
form-encoded callback signed with a second, different scheme.

Both signatures are MD5 over the upper-cased concatenation of byte-reversed
values. Reversal and upper-casing work on UTF-8 bytes (ASCII-only case
mapping) to stay identical to the gateway's implementation for non-ASCII input.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional
from urllib.parse import parse_qsl

from pydantic import ValidationError
from starlette import status as http_status
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from application.dtos.payments import (
    Action,
    ActionType,
    CardToken,
    Invoice,
    Order,
    PlatonCallback,
    callback_errors,
)
from application.ports.payment_gateway import PreSignHook
from core.config import settings
from domain.payment.entity import TransactionType
from infrastructure.external.payments.base import BasePaymentProvider


PUBLIC_URL = "https://secure.platononline.com/payment/auth"
CARD_PAYMENT = "CC"
DESCRIPTION_LIMIT = 255
RECURRING_MARKER = "recurring"

_CENTS = Decimal("0.01")


def _rev(value: Optional[str]) -> bytes:
    return (value or "").encode("utf-8")[::-1]


def _digest(*parts: bytes) -> str:
    return hashlib.md5(b"".join(parts).upper()).hexdigest()


def request_signature(merchant: str, payment: str, data: str, url: str, password: str) -> str:
    """Signature of an outbound payment form (``sign`` field)."""
    return _digest(_rev(merchant), _rev(payment), _rev(data), _rev(url), _rev(password))


def callback_signature(email: Optional[str], password: str, order: str, card: Optional[str]) -> str:
    """Signature Platon puts on callbacks; password and order are not reversed."""
    card = card or ""
    return _digest(
        _rev(email),
        (password or "").encode("utf-8"),
        order.encode("utf-8"),
        _rev(card[:6] + card[-4:]),
    )


def encode_data(data: dict[str, Any]) -> str:
    raw = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def format_amount(amount: Any) -> str:
    return f"{Decimal(str(amount)).quantize(_CENTS, rounding=ROUND_HALF_UP):.2f}"


class PlatonPaymentProvider(BasePaymentProvider):
    provider = "platon"

    @property
    def endpoint(self) -> str:
        return self.config("endpoint") or PUBLIC_URL

    def is_valid(self) -> bool:  # type: ignore[override]
        return bool(self.config("merchant")) and bool(self.config("password"))

    async def create_payment(
        self,
        order: Order,
        callback: Optional[PreSignHook] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> Action:  # type: ignore[override]
        payment = order.payment
        if callback is not None:
            callback(payment, self)
        client = payment.client
        data: dict[str, Any] = {
            "payment": CARD_PAYMENT,
            "url": payment.return_url,
            "lang": payment.language,
            "data": {
                "amount": format_amount(payment.amount),
                "currency": payment.currency,
                "description": (payment.description or "")[:DESCRIPTION_LIMIT],
            },
            "email": client.email,
            "first_name": client.first_name,
            "last_name": client.last_name,
            "phone": client.phone,
        }

        transaction = await self.make_transaction(order, payment, options)
        data["order"] = transaction.transaction_id

        # Gateway reads the marker as the first positional element of "data"
        if payment.card_id == 0:
            data["data"]["0"] = RECURRING_MARKER

        action = Action(
            provider=self.provider,
            type=ActionType.OPEN,
            url=self.endpoint,
            method="POST",
            data=self.sign(data),
        )
        self._log(
            "payment_action_created",
            order_id=order.order_id,
            transaction_id=transaction.transaction_id,
            amount=data["data"]["amount"],
            currency=payment.currency,
            recurring=payment.card_id == 0,
        )
        return action

    def sign(self, data: dict[str, Any]) -> dict[str, Any]:  # type: ignore[override]
        signed = dict(data)
        signed["data"] = encode_data(data["data"])
        signed["key"] = self.config("merchant")
        signed["sign"] = request_signature(
            signed["key"],
            signed.get("payment"),
            signed["data"],
            signed.get("url"),
            self.config("password"),
        )
        return signed

    def sign2(self, payload: PlatonCallback) -> str:
        return callback_signature(payload.email, self.config("password"), payload.order, payload.card)

    async def callback(self, request: Request) -> Response:  # type: ignore[override]
        body = await request.body()
        self._log(
            "callback",
            level="debug",
            ip=request.client.host if request.client else None,
            uri=str(request.url),
            query=dict(request.query_params),
            cookies=dict(request.cookies),
            headers=dict(request.headers),
            body=body[: settings.LOG_REQUEST_BODY_MAX_BYTES].decode("utf-8", errors="replace"),
        )

        try:
            payload = PlatonCallback.model_validate(self._parse_body(request, body))
        except ValidationError as exc:
            errors = callback_errors(exc)
            self._log("callback_invalid", level="warning", fields=sorted(errors))
            return JSONResponse(
                status_code=http_status.HTTP_400_BAD_REQUEST,
                content={"message": "The given data was invalid.", "errors": errors},
            )

        expected = self.sign2(payload)
        if not hmac.compare_digest(expected.encode("utf-8"), payload.sign.encode("utf-8")):
            self._log("callback_signature_invalid", level="warning", order=payload.order, gateway_id=payload.id)
            return JSONResponse(
                status_code=http_status.HTTP_403_FORBIDDEN,
                content={"message": "Invalid signature"},
            )

        status = self._map_status(payload.status)
        if status is None:
            self._log("callback_status_ignored", order=payload.order, gateway_status=payload.status)
            return Response()

        card = None
        if payload.rc_token is not None:
            card = CardToken(
                card=payload.card,
                token=payload.rc_token,
                data={"rc_id": payload.rc_id},
            )
        invoice = Invoice(
            provider=self.provider,
            provider_ref=payload.id,
            transaction_id=payload.order,
            type=TransactionType.PAYMENT,
            status=status,
            amount=Decimal(payload.amount),
            card=card,
        )
        await self.process(invoice)
        return Response()

    @staticmethod
    def _parse_body(request: Request, body: bytes) -> dict[str, Any]:
        content_type = (request.headers.get("content-type") or "").lower()
        text = body.decode("utf-8", errors="replace")
        if "application/json" in content_type:
            try:
                parsed = json.loads(text or "{}")
            except ValueError:
                return {}
            return parsed if isinstance(parsed, dict) else {}
        return dict(parse_qsl(text, keep_blank_values=True))
