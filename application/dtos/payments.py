"""
Payment DTOs (Pydantic v2) used at application boundaries.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.types import condecimal

from domain.payment.entity import TransactionStatus, TransactionType


class Client(BaseModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


class PaymentDetails(BaseModel):
    """What the customer is about to pay for; mutable until the request is signed."""

    amount: condecimal(gt=0)  # type: ignore[valid-type]
    currency: str = Field(default="UAH")
    description: Optional[str] = None
    return_url: Optional[str] = None
    language: Optional[str] = None
    # 0 means "no stored card": the charge may be tokenized for recurring use
    card_id: Optional[int] = None
    client: Client = Field(default_factory=Client)
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, v: str) -> str:
        u = (v or "").upper()
        if len(u) != 3 or not u.isalpha():
            raise ValueError("currency must be ISO-4217 alpha-3")
        return u


class Order(BaseModel):
    order_id: str
    payment: PaymentDetails


class ActionType(str, Enum):
    # The caller should send the browser to ``url`` with ``method``/``data``
    OPEN = "open"


class Action(BaseModel):
    provider: str
    type: ActionType = ActionType.OPEN
    url: str
    method: str = "POST"
    data: dict[str, Any] = Field(default_factory=dict)


class CardToken(BaseModel):
    card: Optional[str] = None
    token: str
    data: dict[str, Any] = Field(default_factory=dict)


class Invoice(BaseModel):
    """Normalized payment status change reported by a provider."""

    provider: str
    provider_ref: str
    transaction_id: str
    type: TransactionType = TransactionType.PAYMENT
    status: TransactionStatus
    amount: Decimal
    card: Optional[CardToken] = None


_REQUIRED_MESSAGE = "The {field} field is required."


class PlatonCallback(BaseModel):
    """Fields posted by Platon to the callback URL."""

    sign: str
    status: str
    id: str
    order: str
    amount: str
    email: Optional[str] = None
    card: Optional[str] = None
    rc_token: Optional[str] = None
    rc_id: Optional[str] = None

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    @field_validator("sign", "status", "id", "order", "amount")
    @classmethod
    def _required(cls, v: str, info) -> str:
        if not v.strip():
            raise ValueError(_REQUIRED_MESSAGE.format(field=info.field_name))
        return v

    @field_validator("amount")
    @classmethod
    def _numeric_amount(cls, v: str) -> str:
        try:
            finite = Decimal(v).is_finite()
        except InvalidOperation:
            finite = False
        if not finite:
            raise ValueError("The amount must be a number.")
        return v


def callback_errors(exc) -> dict[str, list[str]]:
    """Collapse a pydantic ValidationError into ``{field: [messages]}``."""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field = ".".join(str(loc) for loc in err.get("loc", ())) or "body"
        if err.get("type") == "missing" or (err.get("type") == "string_type" and err.get("input") is None):
            message = _REQUIRED_MESSAGE.format(field=field)
        elif err.get("type") == "value_error":
            message = str(err.get("ctx", {}).get("error", err.get("msg", "")))
        else:
            message = f"The {field} field is invalid."
        errors.setdefault(field, []).append(message)
    return errors
