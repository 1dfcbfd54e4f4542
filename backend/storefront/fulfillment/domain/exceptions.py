"""Exceptions spécifiques au domaine Fulfillment."""
from typing import Any, Optional, Sequence

from storefront.core.exceptions import StateError


def _value(status: Any) -> str:
    return getattr(status, "value", status)


class IllegalTransition(StateError):
    """Levée lorsqu'une transition de statut n'est pas autorisée."""
    def __init__(self, axis: str, current: Any, requested: Any, reason: Optional[str] = None):
        message = f"Transition {axis} '{_value(current)}' -> '{_value(requested)}' interdite"
        message += f": {reason}." if reason else "."
        super().__init__(message)
        self.axis = axis
        self.current = current
        self.requested = requested
        self.reason = reason


class MissingCourierInfo(StateError):
    """Levée lorsque les informations transporteur sont absentes ou incomplètes."""
    def __init__(self, missing_fields: Sequence[str], status: Any = None):
        fields = ", ".join(missing_fields)
        if status is not None:
            message = f"Le statut d'expédition '{_value(status)}' exige un transporteur complet (manquant: {fields})."
        else:
            message = f"Informations transporteur incomplètes (manquant: {fields})."
        super().__init__(message)
        self.missing_fields = list(missing_fields)
        self.status = status
