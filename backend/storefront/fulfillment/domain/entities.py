from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from storefront.fulfillment.domain.exceptions import MissingCourierInfo

# Entités du Domaine "Fulfillment"

class ShippingStatus(str, Enum):
    """Axe expédition: progression strictement vers l'avant."""
    PENDING = "pending"
    PACKED = "packed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"

    @property
    def rank(self) -> int:
        return SHIPPING_SEQUENCE.index(self)


SHIPPING_SEQUENCE = (
    ShippingStatus.PENDING,
    ShippingStatus.PACKED,
    ShippingStatus.SHIPPED,
    ShippingStatus.DELIVERED,
)

# Statuts où un transporteur peut être affecté / est obligatoire
COURIER_ALLOWED_STATUSES = frozenset({ShippingStatus.PACKED, ShippingStatus.SHIPPED, ShippingStatus.DELIVERED})
COURIER_REQUIRED_STATUSES = frozenset({ShippingStatus.SHIPPED, ShippingStatus.DELIVERED})


class OrderStatus(str, Enum):
    """Axe commande, indépendant de l'expédition."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


TERMINAL_ORDER_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.REFUNDED})


class CourierInfo(BaseModel):
    """Transporteur: les trois champs sont présents, ou l'objet entier est absent."""
    model_config = ConfigDict(frozen=True)

    courier_name: str
    courier_contact: str
    tracking_id: str

    @model_validator(mode="before")
    @classmethod
    def _all_or_nothing(cls, data):
        if isinstance(data, dict):
            cleaned = {key: (value.strip() if isinstance(value, str) else value) for key, value in data.items()}
            missing = [name for name in ("courier_name", "courier_contact", "tracking_id") if not cleaned.get(name)]
            if missing:
                raise MissingCourierInfo(missing)
            return cleaned
        return data

    @classmethod
    def from_fields(
        cls,
        courier_name: Optional[str] = None,
        courier_contact: Optional[str] = None,
        tracking_id: Optional[str] = None,
    ) -> Optional["CourierInfo"]:
        """Tous vides -> None (aucun transporteur); partiellement remplis -> MissingCourierInfo."""
        values = [courier_name, courier_contact, tracking_id]
        if all(not (value or "").strip() for value in values):
            return None
        return cls(courier_name=courier_name or "", courier_contact=courier_contact or "", tracking_id=tracking_id or "")


class FulfillmentState(BaseModel):
    """Couple statut commande / statut expédition + transporteur éventuel."""
    model_config = ConfigDict(frozen=True)

    order_status: OrderStatus = OrderStatus.PENDING
    shipping_status: ShippingStatus = ShippingStatus.PENDING
    courier: Optional[CourierInfo] = None

    @classmethod
    def initial(cls) -> "FulfillmentState":
        return cls()


class FulfillmentRequest(BaseModel):
    """État cible demandé par le personnel (formulaire complet, comme l'écran admin)."""
    model_config = ConfigDict(frozen=True)

    order_status: OrderStatus
    shipping_status: ShippingStatus
    courier: Optional[CourierInfo] = None
