"""Exceptions spécifiques au domaine Pricing."""
from storefront.core.exceptions import DomainValidationError, ResourceNotFound


class InvalidLineItem(DomainValidationError):
    """Levée lorsqu'un ensemble de lignes de commande est invalide (vide, quantité <= 0...)."""
    pass


class ConfigVersionMissing(DomainValidationError):
    """Levée si la configuration tarifaire n'a pas de version identifiable."""
    def __init__(self):
        super().__init__("La configuration tarifaire doit porter une version pour être reproductible.")


class ConfigVersionMismatch(DomainValidationError):
    """Levée si l'on recalcule une commande avec une autre version que celle enregistrée."""
    def __init__(self, expected: str, received: str):
        super().__init__(
            f"Version de configuration '{received}' fournie, la commande a été tarifée avec '{expected}'."
        )
        self.expected = expected
        self.received = received


class ConfigVersionConflict(DomainValidationError):
    """Levée lorsqu'une version déjà enregistrée est réutilisée avec d'autres valeurs."""
    def __init__(self, version: str):
        super().__init__(
            f"La version de configuration '{version}' existe déjà avec des valeurs différentes."
        )
        self.version = version


class ConfigVersionNotFound(ResourceNotFound):
    """Levée lorsqu'une version de configuration tarifaire est introuvable."""
    def __init__(self, version: str):
        super().__init__("Configuration tarifaire", version)
        self.version = version


class BreakdownInvariantViolation(DomainValidationError):
    """Le total d'un détail de prix ne correspond pas à la somme de ses composantes."""
    pass
