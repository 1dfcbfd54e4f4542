"""
Routes FastAPI pour la facturation des commandes.
"""
import logging

from fastapi import APIRouter, HTTPException, Response, status

from storefront.core.exceptions import ResourceNotFound
from storefront.invoices.dependencies import InvoiceServiceDep
from storefront.invoices.domain.entities import InvoiceDocument
from storefront.invoices.domain.exceptions import InvoiceRenderingError

logger = logging.getLogger(__name__)

invoice_router = APIRouter(
    prefix="/orders",
    tags=["Invoices"],
    responses={404: {"description": "Not found"}},
)


@invoice_router.get("/{order_id}/invoice", response_model=InvoiceDocument)
async def get_invoice_endpoint(
    order_id: str,
    service: InvoiceServiceDep,
):
    """Retourne la facture d'une commande (mêmes valeurs que le PDF)."""
    try:
        return await service.get_invoice(order_id)
    except ResourceNotFound as e:
        logger.warning(f"Facture demandée pour une commande inconnue {order_id}.")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.exception(f"Erreur inattendue construction facture commande {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")


@invoice_router.get("/{order_id}/invoice.pdf")
async def download_invoice_pdf_endpoint(
    order_id: str,
    service: InvoiceServiceDep,
):
    """Télécharge la facture PDF d'une commande."""
    try:
        document, pdf_bytes = await service.render_invoice(order_id)
    except ResourceNotFound as e:
        logger.warning(f"Facture PDF demandée pour une commande inconnue {order_id}.")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvoiceRenderingError as e:
        logger.error(f"Échec du rendu PDF pour la commande {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")
    except Exception as e:
        logger.exception(f"Erreur inattendue facture PDF commande {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{document.invoice_number}.pdf"'},
    )
