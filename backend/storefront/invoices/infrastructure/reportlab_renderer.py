import io
import logging
import os
from xml.sax.saxutils import escape

# ReportLab Imports
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

# Domain
from storefront.core.money import Money
from storefront.invoices.config import InvoiceSettings
from storefront.invoices.domain.entities import InvoiceDocument
from storefront.invoices.domain.exceptions import InvoiceRenderingError
from storefront.invoices.domain.renderer import AbstractInvoiceRenderer

logger = logging.getLogger(__name__)


def _amount(money: Money) -> str:
    return f"{money.amount:.2f}"


class ReportLabInvoiceRenderer(AbstractInvoiceRenderer):
    """Implémentation du rendu de facture utilisant ReportLab."""

    def __init__(self, settings: InvoiceSettings):
        self.settings = settings
        self.primary_color = colors.HexColor(settings.PRIMARY_COLOR_HEX)
        logger.info("[ReportLabInvoiceRenderer] Initialisé.")

    def _header(self, document: InvoiceDocument, styles) -> list:
        elements = []
        title_style = ParagraphStyle(name="SellerTitle", parent=styles["Heading1"], textColor=self.primary_color)
        right_style = ParagraphStyle(name="RightInfo", parent=styles["Normal"], alignment=2)

        logo_path = self.settings.LOGO_PATH
        if logo_path and os.path.exists(logo_path):
            logo = Image(logo_path, width=1.5*inch, height=0.75*inch)
            logo.hAlign = 'LEFT'
            elements.append(logo)
        elif logo_path:
            logger.warning(f"[InvoiceRender] Logo non trouvé : {logo_path}")

        elements.append(Paragraph(escape(document.seller.name), title_style))
        if document.seller.address:
            elements.append(Paragraph(escape(document.seller.address), styles["Normal"]))
        elements.append(Paragraph(
            f"<b>Invoice No:</b> {escape(document.invoice_number)}<br/>"
            f"<b>Invoice Date:</b> {document.issued_at.strftime('%d/%m/%Y')}",
            right_style,
        ))
        elements.append(Spacer(1, 0.2*inch))
        return elements

    def _billed_to(self, document: InvoiceDocument, styles) -> list:
        party = document.billed_to
        details = ["<b>Billed To</b>", escape(party.name)]
        for value in (party.address, party.email, party.phone):
            if value:
                details.append(escape(value))
        return [Paragraph("<br/>".join(details), styles["Normal"]), Spacer(1, 0.2*inch)]

    def _lines_table(self, document: InvoiceDocument, styles) -> Table:
        normal_style = styles["Normal"]
        table_data = [[
            Paragraph("<b>Item</b>", normal_style),
            Paragraph("<b>Qty</b>", normal_style),
            Paragraph(f"<b>Price ({document.currency})</b>", normal_style),
            Paragraph(f"<b>Amount ({document.currency})</b>", normal_style),
        ]]
        for line in document.lines:
            table_data.append([
                Paragraph(escape(line.description), normal_style),
                str(line.quantity),
                _amount(line.unit_price),
                _amount(line.amount),
            ])
        table = Table(table_data, colWidths=[3.2*inch, 0.8*inch, 1.3*inch, 1.5*inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), self.primary_color),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('GRID', (0, 0), (-1, -1), 1, colors.darkgrey),
            ('FONTSIZE', (0, 1), (-1, -1), 10),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ]))
        return table

    def _summary_table(self, document: InvoiceDocument, styles) -> Table:
        normal_style = styles["Normal"]
        note_style = ParagraphStyle(name="SummaryNote", parent=normal_style, fontSize=8, textColor=colors.gray)
        table_data = []
        total_rows = []
        for index, row in enumerate(document.summary):
            if row.amount is not None:
                value = f"- {_amount(row.amount)}" if row.is_deduction else _amount(row.amount)
            else:
                value = Paragraph(escape(row.note or ""), note_style)
            table_data.append([Paragraph(escape(row.label), normal_style), value])
            if row.is_total:
                total_rows.append(index)

        table = Table(table_data, colWidths=[2.6*inch, 1.6*inch], hAlign='RIGHT')
        style = [
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('BOX', (0, 0), (-1, -1), 1, colors.darkgrey),
        ]
        for index in total_rows:
            style.extend([
                ('LINEABOVE', (0, index), (-1, index), 1, colors.darkgrey),
                ('FONTNAME', (0, index), (-1, index), 'Helvetica-Bold'),
                ('TOPPADDING', (0, index), (-1, index), 8),
            ])
        table.setStyle(TableStyle(style))
        return table

    async def render(self, document: InvoiceDocument) -> bytes:
        logger.info(f"[InvoiceRender] Génération PDF facture {document.invoice_number}")

        buffer = io.BytesIO() # Buffer mémoire pour le PDF
        doc = SimpleDocTemplate(buffer, pagesize=A4, title=document.invoice_number)
        styles = getSampleStyleSheet()
        footer_style = ParagraphStyle(name="Footer", fontSize=9, textColor=colors.gray, alignment=1)

        elements = []
        elements.extend(self._header(document, styles))
        elements.extend(self._billed_to(document, styles))
        elements.append(self._lines_table(document, styles))
        elements.append(Spacer(1, 0.3*inch))
        elements.append(self._summary_table(document, styles))
        if document.notes:
            elements.append(Spacer(1, 0.3*inch))
            for note in document.notes:
                elements.append(Paragraph(escape(note), styles["Italic"]))

        # --- Fonction pour le Footer ---
        def add_footer(canvas, doc):
            if not document.footer:
                return
            canvas.saveState()
            footer = Paragraph(escape(document.footer), footer_style)
            w, h = footer.wrap(doc.width, doc.bottomMargin)
            footer.drawOn(canvas, doc.leftMargin, h)
            canvas.restoreState()

        # --- Génération du PDF dans le buffer ---
        try:
            doc.build(elements, onFirstPage=add_footer, onLaterPages=add_footer)
            pdf_bytes = buffer.getvalue()
        except Exception as e:
            logger.error(f"[InvoiceRender] Erreur ReportLab build() pour facture {document.invoice_number}: {e}", exc_info=True)
            raise InvoiceRenderingError(f"Erreur lors de la construction du PDF: {e}", original_exception=e)
        finally:
            buffer.close()

        logger.info(f"[InvoiceRender] Facture {document.invoice_number} générée en mémoire ({len(pdf_bytes)} bytes).")
        return pdf_bytes
