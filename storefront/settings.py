"""
Settings — store configuration loaded from the environment.

    from storefront.settings import get_settings

    settings = get_settings()
    settings.shipping_fees["NCR"]   # Decimal("150")

Every field can be overridden with a ``STOREFRONT_``-prefixed variable,
e.g. ``STOREFRONT_ORDER_NUMBER_PREFIX=ABC``. Mappings are read as JSON:
``STOREFRONT_SHIPPING_FEES='{"NCR": 120, "LUZON": 180, "VISAYAS_MINDANAO": 240}'``.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        extra="ignore",
    )

    store_name: str = "The Peppy Lab"
    timezone: str = "Asia/Manila"

    # Order numbers
    order_number_prefix: str = "TPL"
    order_number_attempts: int = Field(default=3, ge=1)

    # Shipping fee per location, pesos
    shipping_fees: dict[str, Decimal] = Field(
        default_factory=lambda: {
            "NCR": Decimal("150"),
            "LUZON": Decimal("200"),
            "VISAYAS_MINDANAO": Decimal("250"),
        }
    )

    # Payment proof
    max_proof_bytes: int = Field(default=5 * 1024 * 1024, gt=0)

    # Contact handoff
    contact_channel: str = "Telegram"
    contact_url: str = "https://t.me/anntpl"

    # Storage
    cart_storage_key: str = "peptide_cart"
    database_url: str = "sqlite+aiosqlite:///:memory:"


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ("Settings", "get_settings")
