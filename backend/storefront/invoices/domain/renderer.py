from abc import ABC, abstractmethod

from storefront.invoices.domain.entities import InvoiceDocument


class AbstractInvoiceRenderer(ABC):
    """Interface abstraite pour la mise en forme d'une facture.
    Approche orientée données, l'implémentation gère uniquement la mise en page.
    """

    @abstractmethod
    async def render(self, document: InvoiceDocument) -> bytes:
        """Produit le document binaire (PDF) d'une facture.

        Args:
            document: Facture déjà construite; aucun montant n'est recalculé.

        Returns:
            Le contenu binaire du document généré.

        Raises:
            InvoiceRenderingError: Si une erreur survient durant la mise en forme.
        """
        raise NotImplementedError
