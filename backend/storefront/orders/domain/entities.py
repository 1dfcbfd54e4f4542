import logging
import uuid
import warnings
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from storefront.core.money import Money
from storefront.fulfillment.domain.entities import FulfillmentRequest, FulfillmentState
from storefront.fulfillment.domain.state_machine import apply_fulfillment
from storefront.orders.domain.exceptions import InvalidCustomer, PricingDrift, StaleState
from storefront.pricing.domain.entities import DeliveryAddress, LineItemSet, PolicyConfig, PriceBreakdown
from storefront.pricing.domain.exceptions import ConfigVersionMismatch
from storefront.pricing.domain.policy import compute_breakdown

logger = logging.getLogger(__name__)

GUEST_FALLBACK_NAME = "Guest Customer"

# Champs comparés lors de la détection de dérive tarifaire
DRIFT_FIELDS = (
    "subtotal", "discount", "delivery_charge", "handling_fee", "tax",
    "tax_half_a", "tax_half_b", "total", "deferred_delivery_note",
)

# Entités du Domaine "Orders"

class PaymentMethod(str, Enum):
    COD = "cod" # Paiement à la livraison
    UPI = "upi"


class Customer(BaseModel):
    """Référence client: utilisateur enregistré, ou copie dénormalisée d'un invité."""
    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @model_validator(mode="after")
    def _check_identity(self) -> "Customer":
        if not self.user_id and not (self.name or "").strip():
            raise InvalidCustomer("Un client invité doit au minimum fournir un nom.")
        return self

    @property
    def is_guest(self) -> bool:
        return not self.user_id

    def display_name(self, address: Optional[DeliveryAddress] = None) -> str:
        """Nom affiché: nom du profil, sinon destinataire de la livraison, sinon 'Guest Customer'."""
        if self.name:
            return self.name
        if address is not None and address.full_name:
            return address.full_name
        return GUEST_FALLBACK_NAME


class PricingCheck(BaseModel):
    """Résultat d'un recalcul de contrôle (lecture seule)."""
    model_config = ConfigDict(frozen=True)

    order_id: str
    config_version: str
    stored: PriceBreakdown
    recomputed: PriceBreakdown
    drifted_fields: List[str] = []

    @property
    def has_drift(self) -> bool:
        return bool(self.drifted_fields)


class OrderAggregate(BaseModel):
    """Commande passée: immuable, hormis les champs d'exécution (statuts, transporteur).

    Construite uniquement par `place` (ou réhydratée telle quelle par le repository).
    """
    model_config = ConfigDict(frozen=True)

    id: str
    customer: Customer
    items: LineItemSet
    address: DeliveryAddress
    breakdown: PriceBreakdown
    handling_fee_override: Optional[Money] = None
    fulfillment: FulfillmentState = FulfillmentState()
    payment_method: PaymentMethod = PaymentMethod.COD
    payment_reference: Optional[str] = None # Ex: URL de la capture du paiement UPI
    created_at: datetime
    updated_at: datetime
    version: int = 1 # Compteur de concurrence optimiste

    @classmethod
    def place(
        cls,
        items: LineItemSet,
        address: DeliveryAddress,
        customer: Customer,
        config: PolicyConfig,
        *,
        handling_fee_override: Optional[Money] = None,
        payment_method: PaymentMethod = PaymentMethod.COD,
        payment_reference: Optional[str] = None,
        order_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "OrderAggregate":
        """Crée une commande: lignes, adresse et détail de prix capturés ensemble."""
        breakdown = compute_breakdown(items, address, config, handling_fee_override)
        placed_at = now or datetime.now(timezone.utc)
        order = cls(
            id=order_id or str(uuid.uuid4()),
            customer=customer,
            items=items,
            address=address,
            breakdown=breakdown,
            handling_fee_override=handling_fee_override,
            fulfillment=FulfillmentState.initial(),
            payment_method=payment_method,
            payment_reference=payment_reference,
            created_at=placed_at,
            updated_at=placed_at,
        )
        logger.info(
            f"[OrderAggregate] Commande {order.id} créée: total {breakdown.total} "
            f"(config {breakdown.config_version}, provisoire: {breakdown.is_provisional})"
        )
        return order

    def update_fulfillment(
        self,
        current: FulfillmentState,
        request: FulfillmentRequest,
        now: Optional[datetime] = None,
    ) -> "OrderAggregate":
        """Retourne un nouvel instantané où seuls les champs d'exécution changent.

        Raises:
            StaleState: `current` ne correspond pas à l'état réel de la commande.
            IllegalTransition, MissingCourierInfo: Demande refusée par la machine à états.
        """
        if current != self.fulfillment:
            logger.warning(f"[OrderAggregate] État périmé présenté pour la commande {self.id}.")
            raise StaleState(
                self.id,
                f"état présenté {current.order_status.value}/{current.shipping_status.value}, "
                f"état réel {self.fulfillment.order_status.value}/{self.fulfillment.shipping_status.value}",
            )
        new_state = apply_fulfillment(self.fulfillment, request)
        return self.model_copy(update={
            "fulfillment": new_state,
            "updated_at": now or datetime.now(timezone.utc),
            "version": self.version + 1,
        })

    def recompute_for_display(self, config: PolicyConfig) -> PricingCheck:
        """Recalcule le détail de prix avec la version de configuration enregistrée.

        Une dérive n'est jamais bloquante: elle est journalisée et signalée par un
        avertissement PricingDrift, le total stocké reste celui affiché.
        """
        recorded_version = self.breakdown.config_version
        if config.version != recorded_version:
            raise ConfigVersionMismatch(expected=recorded_version, received=str(config.version))

        recomputed = compute_breakdown(self.items, self.address, config, self.handling_fee_override)
        drifted = [
            name for name in DRIFT_FIELDS
            if getattr(self.breakdown, name) != getattr(recomputed, name)
        ]
        if drifted:
            message = (
                f"Dérive tarifaire sur la commande {self.id} (config {recorded_version}): "
                f"champs {', '.join(drifted)}; total stocké {self.breakdown.total}, recalculé {recomputed.total}."
            )
            logger.warning(f"[OrderAggregate] {message}")
            warnings.warn(message, PricingDrift, stacklevel=2)
        return PricingCheck(
            order_id=self.id,
            config_version=recorded_version,
            stored=self.breakdown,
            recomputed=recomputed,
            drifted_fields=drifted,
        )
