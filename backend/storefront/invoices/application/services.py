import logging
from decimal import Decimal
from typing import List, Tuple

from storefront.invoices.config import InvoiceSettings
from storefront.invoices.domain.entities import (
    InvoiceDocument, InvoiceLayout, InvoiceLine, InvoiceParty, InvoiceSummaryRow
)
from storefront.invoices.domain.exceptions import InvoiceRenderingError
from storefront.invoices.domain.renderer import AbstractInvoiceRenderer
from storefront.orders.application.schemas import OrderResponse
from storefront.orders.domain.repositories import AbstractOrderRepository
from storefront.pricing.domain.entities import SplitGST

logger = logging.getLogger(__name__)


def invoice_number(order_id: str) -> str:
    return f"INV-{order_id[:8].upper()}"


def format_rate(rate: Decimal) -> str:
    """Taux en pourcentage sans zéros inutiles: 0.10 -> '10', 0.025 -> '2.5'."""
    text = format((rate * 100).quantize(Decimal("0.01")), "f")
    return text.rstrip("0").rstrip(".")


def _discount_delivery_rows(order: OrderResponse, settings: InvoiceSettings) -> List[InvoiceSummaryRow]:
    breakdown = order.breakdown
    rows = [InvoiceSummaryRow(label="Subtotal", amount=breakdown.subtotal)]
    if not breakdown.discount.is_zero():
        rows.append(InvoiceSummaryRow(
            label=f"{settings.REGIONAL_DISCOUNT_LABEL} ({format_rate(breakdown.discount_rate)}%)",
            amount=breakdown.discount,
            is_deduction=True,
        ))
    if breakdown.deferred_delivery_note:
        rows.append(InvoiceSummaryRow(label=settings.DEFERRED_DELIVERY_LABEL, note=settings.DEFERRED_DELIVERY_NOTE))
    else:
        rows.append(InvoiceSummaryRow(label="Delivery Charge", amount=breakdown.delivery_charge))
    rows.append(InvoiceSummaryRow(label="Handling Fee", amount=breakdown.handling_fee))
    rows.append(InvoiceSummaryRow(label="Total Payable", amount=breakdown.total, is_total=True))
    return rows


def _gst_split_rows(order: OrderResponse, settings: InvoiceSettings) -> List[InvoiceSummaryRow]:
    breakdown = order.breakdown
    currency = breakdown.total.currency
    half_rate = format_rate(breakdown.tax_model.rate / 2)
    rows = [InvoiceSummaryRow(label=f"Subtotal ({currency})", amount=breakdown.subtotal)]
    # Remise, livraison et frais n'apparaissent que s'ils participent au total
    if not breakdown.discount.is_zero():
        rows.append(InvoiceSummaryRow(
            label=f"{settings.REGIONAL_DISCOUNT_LABEL} ({format_rate(breakdown.discount_rate)}%)",
            amount=breakdown.discount,
            is_deduction=True,
        ))
    if not breakdown.delivery_charge.is_zero():
        rows.append(InvoiceSummaryRow(label="Delivery Charge", amount=breakdown.delivery_charge))
    if not breakdown.handling_fee.is_zero():
        rows.append(InvoiceSummaryRow(label="Handling Fee", amount=breakdown.handling_fee))
    rows.append(InvoiceSummaryRow(label=f"CGST ({half_rate}%)", amount=breakdown.tax_half_a))
    rows.append(InvoiceSummaryRow(label=f"SGST ({half_rate}%)", amount=breakdown.tax_half_b))
    rows.append(InvoiceSummaryRow(label=f"Total Amount ({currency})", amount=breakdown.total, is_total=True))
    return rows


def build_invoice(order: OrderResponse, settings: InvoiceSettings) -> InvoiceDocument:
    """Construit la facture à partir de la vue canonique de la commande.

    Les montants sont repris tels quels du détail de prix enregistré et de
    `line_total`; le choix de la mise en page dépend du modèle de taxe.
    """
    breakdown = order.breakdown
    if isinstance(breakdown.tax_model, SplitGST):
        layout = InvoiceLayout.GST_SPLIT
        summary = _gst_split_rows(order, settings)
    else:
        layout = InvoiceLayout.DISCOUNT_DELIVERY
        summary = _discount_delivery_rows(order, settings)

    notes: List[str] = []
    if breakdown.deferred_delivery_note and layout == InvoiceLayout.GST_SPLIT:
        notes.append(settings.DEFERRED_DELIVERY_NOTE)
    if breakdown.is_provisional:
        notes.append(settings.PROVISIONAL_NOTICE)

    return InvoiceDocument(
        invoice_number=invoice_number(order.id),
        order_id=order.id,
        issued_at=order.created_at,
        currency=breakdown.total.currency,
        layout=layout,
        seller=InvoiceParty(name=settings.SELLER_NAME, address=settings.SELLER_ADDRESS),
        billed_to=InvoiceParty(
            name=order.customer.name,
            address=order.address.one_line(),
            email=order.customer.email,
            phone=order.customer.phone,
        ),
        lines=[
            InvoiceLine(
                description=item.product_name or item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                amount=item.line_total,
            )
            for item in order.items
        ],
        summary=summary,
        total=breakdown.total,
        is_provisional=breakdown.is_provisional,
        notes=notes,
        footer=settings.FOOTER_TEXT,
    )


class InvoiceService:
    """Service applicatif pour la facturation des commandes."""

    def __init__(self,
                 order_repo: AbstractOrderRepository,
                 renderer: AbstractInvoiceRenderer,
                 settings: InvoiceSettings):
        self.order_repo = order_repo
        self.renderer = renderer
        self.settings = settings

    async def get_invoice(self, order_id: str) -> InvoiceDocument:
        order = await self.order_repo.load(order_id)
        return build_invoice(OrderResponse.from_aggregate(order), self.settings)

    async def render_invoice(self, order_id: str) -> Tuple[InvoiceDocument, bytes]:
        """Construit puis met en forme la facture d'une commande.

        Raises:
            OrderNotFound: Si la commande n'existe pas.
            InvoiceRenderingError: Si la mise en forme échoue.
        """
        document = await self.get_invoice(order_id)
        logger.info(f"[InvoiceService] Demande de rendu pour la facture {document.invoice_number}.")
        try:
            return document, await self.renderer.render(document)
        except InvoiceRenderingError as e:
            logger.error(f"[InvoiceService] Échec rendu facture {document.invoice_number}: {e}")
            raise
        except Exception as e:
            logger.error(f"[InvoiceService] Erreur inattendue rendu facture {document.invoice_number}: {e}", exc_info=True)
            raise InvoiceRenderingError(f"Erreur inattendue: {e}", original_exception=e)
