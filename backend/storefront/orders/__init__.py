"""
Module Orders - Gestion des commandes
"""

# Exposer les entités et schémas pour faciliter les imports
from storefront.orders.domain.entities import Customer, OrderAggregate, PaymentMethod, PricingCheck
from storefront.orders.application.schemas import (
    OrderCreate, OrderResponse, FulfillmentUpdate, PaginatedOrderResponse, OrderItemCreate
)

__all__ = [
    "Customer", "OrderAggregate", "PaymentMethod", "PricingCheck",
    "OrderCreate", "OrderResponse", "FulfillmentUpdate", "PaginatedOrderResponse", "OrderItemCreate",
]
