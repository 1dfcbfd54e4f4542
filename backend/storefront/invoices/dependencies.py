"""
Dépendances pour le module Invoices.
"""
from typing import Annotated

from fastapi import Depends

from storefront.invoices.application.services import InvoiceService
from storefront.invoices.config import InvoiceSettings, invoice_settings
from storefront.invoices.domain.renderer import AbstractInvoiceRenderer
from storefront.invoices.infrastructure.reportlab_renderer import ReportLabInvoiceRenderer
from storefront.orders.dependencies import OrderRepositoryDep

# --- Invoice Settings Dependency ---

def get_invoice_settings() -> InvoiceSettings:
    """Retourne l'instance globale des paramètres de facturation."""
    return invoice_settings

InvoiceSettingsDep = Annotated[InvoiceSettings, Depends(get_invoice_settings)]

# --- Invoice Renderer Dependency ---

def get_invoice_renderer(settings: InvoiceSettingsDep) -> AbstractInvoiceRenderer:
    """Fournit l'implémentation concrète du rendu, en injectant la configuration."""
    return ReportLabInvoiceRenderer(settings=settings)

InvoiceRendererDep = Annotated[AbstractInvoiceRenderer, Depends(get_invoice_renderer)]

# --- Invoice Service Dependency ---

def get_invoice_service(
    order_repo: OrderRepositoryDep,
    renderer: InvoiceRendererDep,
    settings: InvoiceSettingsDep,
) -> InvoiceService:
    return InvoiceService(order_repo=order_repo, renderer=renderer, settings=settings)

InvoiceServiceDep = Annotated[InvoiceService, Depends(get_invoice_service)]
