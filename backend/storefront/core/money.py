"""
Type valeur monétaire à précision fixe.

Tous les montants portent exactement deux décimales. L'arrondi (au demi
supérieur, c'est-à-dire en s'éloignant de zéro) n'est appliqué qu'une fois,
au moment où une valeur dérivée est matérialisée (remise, taxe, demi-taxe),
jamais après combinaison.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Tuple, Union

from pydantic import BaseModel, ConfigDict, field_validator

from storefront.core.exceptions import CurrencyMismatch, InvalidMoney, NegativeResult

CENT = Decimal("0.01")
DEFAULT_CURRENCY = "INR"

MoneyInput = Union[str, int, Decimal]


def round_half_away_from_zero(value: Decimal) -> Decimal:
    """Arrondit au centime, les demis s'éloignant de zéro."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _to_decimal(value: MoneyInput) -> Decimal:
    if isinstance(value, bool) or isinstance(value, float):
        # Les flottants (et booléens) sont refusés: source de dérive.
        raise InvalidMoney(f"Type de montant non supporté: {type(value).__name__}.")
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidMoney(f"Montant illisible: '{value}'.") from e


class Money(BaseModel):
    """Montant non négatif à deux décimales, étiqueté par sa devise."""
    model_config = ConfigDict(frozen=True)

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    @field_validator("amount")
    @classmethod
    def _check_amount(cls, value: Decimal) -> Decimal:
        if not value.is_finite():
            raise InvalidMoney(f"Montant non fini: {value}.")
        if value < 0:
            raise InvalidMoney(f"Montant négatif refusé: {value}.")
        try:
            quantized = value.quantize(CENT)
        except InvalidOperation as e:
            raise InvalidMoney(f"Montant hors de la précision supportée: {value}.") from e
        if quantized != value:
            raise InvalidMoney(f"Le montant {value} a plus de deux décimales.")
        return quantized

    @field_validator("currency")
    @classmethod
    def _check_currency(cls, value: str) -> str:
        code = value.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise InvalidMoney(f"Code devise invalide: '{value}'.")
        return code

    # --- Constructeurs ---

    @classmethod
    def of(cls, value: MoneyInput, currency: str = DEFAULT_CURRENCY) -> "Money":
        """Construit un montant depuis une chaîne décimale, un Decimal ou un entier (unités majeures)."""
        return cls(amount=_to_decimal(value), currency=currency)

    @classmethod
    def from_minor_units(cls, minor_units: int, currency: str = DEFAULT_CURRENCY) -> "Money":
        if isinstance(minor_units, bool) or not isinstance(minor_units, int):
            raise InvalidMoney(f"Unités mineures entières attendues, reçu: {minor_units!r}.")
        return cls(amount=Decimal(minor_units).scaleb(-2), currency=currency)

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> "Money":
        return cls(amount=Decimal("0.00"), currency=currency)

    @property
    def minor_units(self) -> int:
        return int(self.amount.scaleb(2))

    def is_zero(self) -> bool:
        return self.amount == 0

    # --- Arithmétique ---

    def _check_same_currency(self, other: "Money") -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Opération impossible entre Money et {type(other).__name__}.")
        if other.currency != self.currency:
            raise CurrencyMismatch(self.currency, other.currency)

    def __add__(self, other: "Money") -> "Money":
        self._check_same_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check_same_currency(other)
        result = self.amount - other.amount
        if result < 0:
            raise NegativeResult(
                f"{self.amount} - {other.amount} {self.currency} donnerait un montant négatif."
            )
        return Money(amount=result, currency=self.currency)

    def times(self, quantity: int) -> "Money":
        """Multiplication exacte par une quantité entière (aucun arrondi)."""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise InvalidMoney(f"Quantité entière positive attendue, reçu: {quantity!r}.")
        return Money(amount=self.amount * quantity, currency=self.currency)

    def scale(self, rate: MoneyInput) -> "Money":
        """Applique un taux (remise, taxe) et arrondit une seule fois."""
        rate_value = _to_decimal(rate)
        if rate_value < 0:
            raise InvalidMoney(f"Taux négatif refusé: {rate_value}.")
        return Money(amount=round_half_away_from_zero(self.amount * rate_value), currency=self.currency)

    def split_in_two(self) -> Tuple["Money", "Money"]:
        """Partage en deux moitiés, l'éventuelle unité mineure impaire allant à la première."""
        minor = self.minor_units
        second = minor // 2
        return (
            Money.from_minor_units(minor - second, self.currency),
            Money.from_minor_units(second, self.currency),
        )

    # --- Comparaisons ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same_currency(other)
        return self.amount == other.amount

    def __hash__(self) -> int:
        return hash((self.amount, self.currency))

    def __lt__(self, other: "Money") -> bool:
        self._check_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: "Money") -> bool:
        self._check_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: "Money") -> bool:
        self._check_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: "Money") -> bool:
        self._check_same_currency(other)
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"
