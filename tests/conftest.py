"""Pytest bootstrap configuration.

Environment is set before application modules are imported so settings and
the database engine pick up test values.
"""
import os

os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE__CREATE_TABLES", "false")

from decimal import Decimal
from typing import Optional

import pytest
from starlette.requests import Request

from application.dtos.payments import Client, Order, PaymentDetails
from domain.payment.entity import Transaction


MERCHANT = "M1"
PASSWORD = "P1"


class StubStore:
    def __init__(self, transaction_id: str = "123", error: Optional[Exception] = None):
        self.transaction_id = transaction_id
        self.error = error
        self.calls = []

    async def create_transaction(self, order, payment, options=None):
        self.calls.append((order, payment, options))
        if self.error is not None:
            raise self.error
        return Transaction(
            id=1,
            transaction_id=self.transaction_id,
            provider=(options or {}).get("provider", "platon"),
            order_id=order.order_id,
            amount=Decimal(payment.amount),
            currency=payment.currency,
        )


class StubProcessor:
    def __init__(self):
        self.invoices = []

    async def process(self, invoice):
        self.invoices.append(invoice)
        return invoice


@pytest.fixture
def store():
    return StubStore()


@pytest.fixture
def processor():
    return StubProcessor()


@pytest.fixture
def platon(store, processor):
    from infrastructure.external.payments.platon_client import PlatonPaymentProvider

    return PlatonPaymentProvider(
        {"merchant": MERCHANT, "password": PASSWORD},
        transactions=store,
        processor=processor,
    )


@pytest.fixture
def order():
    return Order(
        order_id="o-1",
        payment=PaymentDetails(
            amount=Decimal("10"),
            currency="UAH",
            description="Coffee beans",
            return_url="https://shop.example/return",
            language="en",
            client=Client(email="a@b.com", first_name="Ann", last_name="Lee", phone="+380000000000"),
        ),
    )


def make_request(body: bytes, content_type: str = "application/x-www-form-urlencoded") -> Request:
    """Build a Starlette POST request carrying ``body``."""
    sent = False

    async def receive():
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": "POST",
        "scheme": "https",
        "path": "/api/v1/payments/platon/callback",
        "raw_path": b"/api/v1/payments/platon/callback",
        "root_path": "",
        "query_string": b"",
        "headers": [
            (b"host", b"shop.example"),
            (b"content-type", content_type.encode("latin-1")),
            (b"cookie", b"session=abc"),
        ],
        "client": ("203.0.113.7", 40000),
        "server": ("shop.example", 443),
    }
    return Request(scope, receive)


@pytest.fixture
def request_factory():
    return make_request
