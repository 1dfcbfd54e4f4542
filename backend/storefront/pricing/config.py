"""Configuration tarifaire de l'environnement (politique en vigueur).

Les valeurs sont surchargées par des variables d'environnement préfixées
par PRICING_ (ex: PRICING_POLICY_VERSION=2025-03, PRICING_TAX_MODEL=split_gst).
Toute modification de valeur doit s'accompagner d'une nouvelle version.
"""
from decimal import Decimal
from typing import Literal, Optional

from pydantic_settings import BaseSettings

from storefront.core.money import Money
from storefront.pricing.domain.entities import NoTax, PolicyConfig, SplitGST


class PricingSettings(BaseSettings):
    """Paramètres de la politique tarifaire en vigueur."""

    POLICY_VERSION: Optional[str] = "2024-01-manipur"
    CURRENCY: str = "INR"
    REGIONAL_PREFIX: str = "795"
    REGIONAL_DISCOUNT_RATE: Decimal = Decimal("0.10")
    REGIONAL_DELIVERY_CHARGE: Decimal = Decimal("80.00")
    DEFAULT_HANDLING_FEE: Decimal = Decimal("0.00")
    TAX_MODEL: Literal["none", "split_gst"] = "none"
    TAX_RATE: Decimal = Decimal("0.18")

    class Config:
        env_prefix = 'PRICING_'
        env_file = '.env'
        env_file_encoding = 'utf-8'
        extra = 'ignore'


def live_policy_config(settings: Optional[PricingSettings] = None) -> PolicyConfig:
    """Construit la PolicyConfig en vigueur à partir des paramètres d'environnement."""
    settings = settings or pricing_settings
    tax_model = SplitGST(rate=settings.TAX_RATE) if settings.TAX_MODEL == "split_gst" else NoTax()
    return PolicyConfig(
        version=settings.POLICY_VERSION,
        currency=settings.CURRENCY,
        regional_prefix=settings.REGIONAL_PREFIX,
        regional_discount_rate=settings.REGIONAL_DISCOUNT_RATE,
        regional_delivery_charge=Money.of(settings.REGIONAL_DELIVERY_CHARGE, settings.CURRENCY),
        default_handling_fee=Money.of(settings.DEFAULT_HANDLING_FEE, settings.CURRENCY),
        tax_model=tax_model,
    )

# Instance globale unique des paramètres (peut être utilisée directement ou injectée)
pricing_settings = PricingSettings()
