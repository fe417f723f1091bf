"""
Payment-related settings using pydantic-settings v2 with nested env keys.

Provider credentials live here, apart from core.config.Settings, so that a
provider's configuration can be handed to its adapter as a plain mapping.
"""
from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, BaseModel, Field


class PlatonSettings(BaseModel):
    # PLATON__MERCHANT style env keys arrive upper-cased under case_sensitive=True
    merchant: Optional[str] = Field(default=None, validation_alias=AliasChoices("MERCHANT", "merchant"))
    password: Optional[str] = Field(default=None, validation_alias=AliasChoices("PASSWORD", "password"))
    endpoint: str = Field(
        default="https://secure.platononline.com/payment/auth",
        validation_alias=AliasChoices("ENDPOINT", "endpoint"),
    )


class PaymentSettings(BaseSettings):
    default_provider: str = Field(default="platon", validation_alias="PAYMENT__DEFAULT_PROVIDER")

    platon: PlatonSettings = Field(default_factory=PlatonSettings, validation_alias="PLATON")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
        env_nested_delimiter="__",
    )

    def provider_config(self, provider: str) -> dict:
        """Return the raw configuration mapping for ``provider`` (empty when unknown)."""
        section = getattr(self, provider.lower(), None)
        if isinstance(section, BaseModel):
            return section.model_dump()
        return {}


payment_settings = PaymentSettings()
