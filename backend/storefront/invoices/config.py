"""Configuration spécifique au module Invoices.

Utilise Pydantic BaseSettings pour permettre la surcharge par
des variables d'environnement préfixées par INVOICE_.
"""
from typing import Optional

from pydantic_settings import BaseSettings


class InvoiceSettings(BaseSettings):
    """Paramètres de présentation des factures (aucun n'influe sur les montants)."""

    SELLER_NAME: str = "Moms by Goo Goo Foods"
    SELLER_ADDRESS: str = "Singjamei Chingamakha, Imphal, Manipur-795001"
    REGIONAL_DISCOUNT_LABEL: str = "Manipur Discount"
    DEFERRED_DELIVERY_LABEL: str = "Delivery @ ₹120–₹150 / kg"
    DEFERRED_DELIVERY_NOTE: str = (
        "Extra delivery fee may apply @ ₹120–₹150 per kg. "
        "Delivery or Shipping charges will be adjusted before dispatch of the parcel."
    )
    PROVISIONAL_NOTICE: str = "Provisional total: delivery charges are not included yet."
    FOOTER_TEXT: str = "This is a computer-generated invoice. No signature required."
    PRIMARY_COLOR_HEX: str = "#2f5d50" # Stocker la couleur comme string HEX
    LOGO_PATH: Optional[str] = None

    class Config:
        env_prefix = 'INVOICE_'
        env_file = '.env'
        env_file_encoding = 'utf-8'
        extra = 'ignore'

# Instance globale unique des paramètres (peut être utilisée directement ou injectée)
invoice_settings = InvoiceSettings()
