"""Exceptions spécifiques au domaine Order."""
from storefront.core.exceptions import ConcurrencyError, DomainValidationError, ResourceNotFound


class OrderNotFound(ResourceNotFound):
    """Levée lorsqu'une commande spécifique n'est pas trouvée."""
    def __init__(self, order_id: str):
        super().__init__("Commande", order_id)
        self.order_id = order_id


class InvalidCustomer(DomainValidationError):
    """Levée si le client n'est ni un utilisateur enregistré ni un invité identifiable."""
    pass


class StaleState(ConcurrencyError):
    """L'état présenté par l'appelant n'est plus l'état courant de la commande."""
    def __init__(self, order_id: str, detail: str = ""):
        message = f"La commande {order_id} a été modifiée entre-temps, rechargez-la puis réessayez."
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.order_id = order_id


class PricingDrift(UserWarning):
    """Avertissement non bloquant: le total stocké diffère du recalcul canonique."""
    pass
