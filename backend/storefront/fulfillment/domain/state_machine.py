"""
Machine à états de l'exécution des commandes.

Deux axes indépendants:
    expédition: pending -> packed -> shipped -> delivered (vers l'avant uniquement)
    commande:   pending -> {confirmed, cancelled}, confirmed -> {cancelled, refunded}

Rester sur le même statut est toujours accepté (ré-enregistrement idempotent).
Les fonctions sont pures: la persistance est à la charge de l'appelant.
"""
import logging
from typing import Optional, Union

from storefront.fulfillment.domain.entities import (
    COURIER_ALLOWED_STATUSES, COURIER_REQUIRED_STATUSES, TERMINAL_ORDER_STATUSES,
    FulfillmentRequest, FulfillmentState, OrderStatus, ShippingStatus
)
from storefront.fulfillment.domain.exceptions import IllegalTransition, MissingCourierInfo

logger = logging.getLogger(__name__)

_ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.CANCELLED: set(),
    OrderStatus.REFUNDED: set(),
}


def transition_shipping(current: ShippingStatus, requested: ShippingStatus) -> ShippingStatus:
    if requested.rank < current.rank:
        raise IllegalTransition("expédition", current, requested, "retour en arrière impossible")
    return requested


def transition_order(
    current: OrderStatus,
    requested: OrderStatus,
    shipping_status: ShippingStatus = ShippingStatus.PENDING,
) -> OrderStatus:
    if requested == current:
        return current
    if current in TERMINAL_ORDER_STATUSES:
        raise IllegalTransition("commande", current, requested, "statut terminal")
    if requested not in _ORDER_TRANSITIONS[current]:
        raise IllegalTransition("commande", current, requested)
    if requested == OrderStatus.CANCELLED and shipping_status != ShippingStatus.PENDING:
        raise IllegalTransition(
            "commande", current, requested,
            f"la commande est déjà en expédition ('{shipping_status.value}')"
        )
    return requested


def transition(
    current: Union[ShippingStatus, OrderStatus],
    requested: Union[ShippingStatus, OrderStatus],
    shipping_status: Optional[ShippingStatus] = None,
) -> Union[ShippingStatus, OrderStatus]:
    """Transition générique sur l'un ou l'autre axe."""
    if isinstance(current, ShippingStatus) and isinstance(requested, ShippingStatus):
        return transition_shipping(current, requested)
    if isinstance(current, OrderStatus) and isinstance(requested, OrderStatus):
        return transition_order(current, requested, shipping_status or ShippingStatus.PENDING)
    raise IllegalTransition("inter-axes", current, requested, "les deux statuts doivent appartenir au même axe")


def apply_fulfillment(state: FulfillmentState, request: FulfillmentRequest) -> FulfillmentState:
    """Valide et applique une demande complète (statuts + transporteur).

    Returns:
        Le nouvel état validé. L'état d'entrée n'est jamais modifié.

    Raises:
        IllegalTransition: Transition refusée sur l'un des axes, ou transporteur
            affecté alors que le colis n'est pas encore préparé.
        MissingCourierInfo: Expédition/livraison sans transporteur complet.
    """
    try:
        shipping = transition_shipping(state.shipping_status, request.shipping_status)
        # La règle d'annulation s'évalue sur le statut d'expédition résultant
        order = transition_order(state.order_status, request.order_status, shipping)

        if request.courier is not None and shipping not in COURIER_ALLOWED_STATUSES:
            raise IllegalTransition(
                "transporteur", state.shipping_status, shipping,
                "affectation possible seulement à partir de 'packed'"
            )
        if shipping in COURIER_REQUIRED_STATUSES and request.courier is None:
            raise MissingCourierInfo(["courier_name", "courier_contact", "tracking_id"], status=shipping)
    except (IllegalTransition, MissingCourierInfo) as e:
        logger.warning(f"[FulfillmentStateMachine] Demande refusée: {e}")
        raise

    return FulfillmentState(order_status=order, shipping_status=shipping, courier=request.courier)
