"""Exceptions spécifiques au domaine Invoices."""
from typing import Optional

from storefront.core.exceptions import StorefrontException


class InvoiceRenderingError(StorefrontException):
    """Levée lorsqu'une erreur survient pendant la mise en forme d'une facture."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        full_message = f"Erreur lors du rendu de la facture: {message}"
        if original_exception:
            full_message += f" (Erreur originale: {original_exception})"
        super().__init__(full_message)
        self.original_exception = original_exception
