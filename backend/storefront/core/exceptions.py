"""Racines de la taxonomie d'erreurs du noyau commande/tarification.

Chaque module déclare ses exceptions concrètes (pricing, fulfillment, orders...)
en dérivant de l'une des familles ci-dessous, ce qui permet aux routeurs de
traduire une famille entière en un code HTTP.
"""
from typing import Optional


class StorefrontException(Exception):
    """Classe de base pour toutes les exceptions du domaine."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class DomainValidationError(StorefrontException):
    """Erreur corrigeable par l'appelant. Jamais rejouée automatiquement."""
    pass


class StateError(StorefrontException):
    """Transition d'état refusée. L'agrégat reste inchangé."""
    pass


class ConcurrencyError(StorefrontException):
    """L'état connu de l'appelant n'est plus l'état courant: recharger puis réessayer."""
    pass


class ResourceNotFound(StorefrontException):
    """Levée lorsqu'une ressource identifiée n'existe pas."""
    def __init__(self, resource: str, identifier: Optional[str] = None):
        if identifier is not None:
            super().__init__(f"{resource} avec ID {identifier} non trouvé(e).")
        else:
            super().__init__(f"{resource} non trouvé(e).")
        self.resource = resource
        self.identifier = identifier


# --- Erreurs du type Money ---

class InvalidMoney(DomainValidationError):
    """Montant illisible, négatif ou avec plus de deux décimales."""
    pass


class CurrencyMismatch(DomainValidationError):
    """Levée lorsqu'on combine ou compare deux devises différentes."""
    def __init__(self, left: str, right: str):
        super().__init__(f"Devises incompatibles: {left} et {right}.")
        self.left = left
        self.right = right


class NegativeResult(DomainValidationError):
    """Une soustraction ferait passer un montant sous zéro."""
    pass
