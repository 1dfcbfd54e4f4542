from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from storefront.config import settings
from storefront.core.money import Money
from storefront.fulfillment.domain.entities import (
    CourierInfo, FulfillmentRequest, FulfillmentState, OrderStatus, ShippingStatus
)
from storefront.orders.domain.entities import Customer, OrderAggregate, PaymentMethod, PricingCheck
from storefront.pricing.domain.entities import DeliveryAddress, PriceBreakdown

# --- Schémas d'entrée ---

class OrderItemCreate(BaseModel):
    """Ligne demandée. Le prix est lu dans le catalogue, jamais fourni par l'API."""
    product_id: str
    quantity: int = Field(le=settings.MAX_ITEM_QUANTITY)


class CustomerIn(BaseModel):
    """Client: identifiant utilisateur, ou coordonnées d'un invité."""
    user_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None

    def to_domain(self) -> Customer:
        return Customer(**self.model_dump())


class CheckoutPreviewRequest(BaseModel):
    items: List[OrderItemCreate]
    address: DeliveryAddress


class OrderCreate(BaseModel):
    """Schéma pour la création d'une commande (checkout)."""
    customer: CustomerIn
    items: List[OrderItemCreate]
    address: DeliveryAddress
    payment_method: PaymentMethod = PaymentMethod.COD
    payment_reference: Optional[str] = None


class FulfillmentStateIn(BaseModel):
    """État d'exécution tel que saisi dans l'écran admin (champs transporteur à plat)."""
    order_status: OrderStatus
    shipping_status: ShippingStatus
    courier_name: Optional[str] = None
    courier_contact: Optional[str] = None
    tracking_id: Optional[str] = None

    def courier(self) -> Optional[CourierInfo]:
        return CourierInfo.from_fields(self.courier_name, self.courier_contact, self.tracking_id)

    def to_state(self) -> FulfillmentState:
        return FulfillmentState(
            order_status=self.order_status,
            shipping_status=self.shipping_status,
            courier=self.courier(),
        )

    def to_request(self) -> FulfillmentRequest:
        return FulfillmentRequest(
            order_status=self.order_status,
            shipping_status=self.shipping_status,
            courier=self.courier(),
        )


class FulfillmentUpdate(BaseModel):
    """Mise à jour d'exécution: l'état que l'appelant croit courant, et l'état visé."""
    current: FulfillmentStateIn
    target: FulfillmentStateIn

# --- Schémas de réponse ---

class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    unit_price: Money
    quantity: int
    line_total: Money


class CustomerResponse(BaseModel):
    user_id: Optional[str] = None
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    is_guest: bool


class OrderResponse(BaseModel):
    """Vue canonique d'une commande, partagée par l'admin et la facturation."""
    id: str
    customer: CustomerResponse
    items: List[OrderItemResponse]
    address: DeliveryAddress
    breakdown: PriceBreakdown
    order_status: OrderStatus
    shipping_status: ShippingStatus
    courier: Optional[CourierInfo] = None
    payment_method: PaymentMethod
    payment_reference: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    version: int

    @classmethod
    def from_aggregate(cls, order: OrderAggregate) -> "OrderResponse":
        return cls(
            id=order.id,
            customer=CustomerResponse(
                user_id=order.customer.user_id,
                name=order.customer.display_name(order.address),
                email=order.customer.email,
                phone=order.customer.phone or order.address.phone,
                is_guest=order.customer.is_guest,
            ),
            items=[
                OrderItemResponse(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                    line_total=item.line_total(),
                )
                for item in order.items.items
            ],
            address=order.address,
            breakdown=order.breakdown,
            order_status=order.fulfillment.order_status,
            shipping_status=order.fulfillment.shipping_status,
            courier=order.fulfillment.courier,
            payment_method=order.payment_method,
            payment_reference=order.payment_reference,
            created_at=order.created_at,
            updated_at=order.updated_at,
            version=order.version,
        )


class PaginatedOrderResponse(BaseModel):
    """Schéma pour la réponse paginée d'une liste de commandes."""
    items: List[OrderResponse]
    total: int


class PricingCheckResponse(BaseModel):
    """Résultat du contrôle de dérive tarifaire d'une commande."""
    order_id: str
    config_version: str
    stored: PriceBreakdown
    recomputed: PriceBreakdown
    drifted_fields: List[str]
    has_drift: bool

    @classmethod
    def from_check(cls, check: PricingCheck) -> "PricingCheckResponse":
        return cls(
            order_id=check.order_id,
            config_version=check.config_version,
            stored=check.stored,
            recomputed=check.recomputed,
            drifted_fields=check.drifted_fields,
            has_drift=check.has_drift,
        )
