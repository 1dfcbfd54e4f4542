from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from storefront.core.money import Money

# Entités du Domaine "Invoices"
# Modèle indépendant du rendu: l'API et le PDF affichent les mêmes valeurs.

class InvoiceLayout(str, Enum):
    DISCOUNT_DELIVERY = "discount_delivery" # Remise régionale + livraison + frais
    GST_SPLIT = "gst_split" # CGST / SGST


class InvoiceParty(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class InvoiceLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    quantity: int
    unit_price: Money
    amount: Money


class InvoiceSummaryRow(BaseModel):
    """Ligne du bloc récapitulatif. Sans montant, `note` est affichée à la place."""
    model_config = ConfigDict(frozen=True)

    label: str
    amount: Optional[Money] = None
    note: Optional[str] = None
    is_deduction: bool = False
    is_total: bool = False


class InvoiceDocument(BaseModel):
    """Facture prête à afficher. Aucun montant n'y est recalculé."""
    model_config = ConfigDict(frozen=True)

    invoice_number: str
    order_id: str
    issued_at: datetime
    currency: str
    layout: InvoiceLayout
    seller: InvoiceParty
    billed_to: InvoiceParty
    lines: List[InvoiceLine]
    summary: List[InvoiceSummaryRow]
    total: Money
    is_provisional: bool = False
    notes: List[str] = []
    footer: Optional[str] = None
