from decimal import Decimal
from typing import Annotated, Literal, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from storefront.core.money import DEFAULT_CURRENCY, Money
from storefront.pricing.domain.exceptions import BreakdownInvariantViolation, InvalidLineItem

# Entités du Domaine "Pricing"

class LineItem(BaseModel):
    """Ligne de commande. Le prix unitaire est figé au moment de la commande."""
    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str = "" # Copie du nom catalogue, n'intervient jamais dans le prix
    unit_price: Money
    quantity: int

    @model_validator(mode="after")
    def _check_quantity(self) -> "LineItem":
        if self.quantity <= 0:
            raise InvalidLineItem(
                f"Quantité invalide ({self.quantity}) pour le produit '{self.product_id}'."
            )
        return self

    def line_total(self) -> Money:
        return self.unit_price.times(self.quantity)


class LineItemSet(BaseModel):
    """Collection ordonnée et validée de lignes de commande."""
    model_config = ConfigDict(frozen=True)

    items: Tuple[LineItem, ...]

    @model_validator(mode="after")
    def _check_items(self) -> "LineItemSet":
        if not self.items:
            raise InvalidLineItem("Impossible de constituer une commande sans articles.")
        currencies = {item.unit_price.currency for item in self.items}
        if len(currencies) > 1:
            raise InvalidLineItem(f"Devises multiples dans une même commande: {sorted(currencies)}.")
        return self

    @classmethod
    def of(cls, items: Sequence[LineItem]) -> "LineItemSet":
        return cls(items=tuple(items))

    @property
    def currency(self) -> str:
        return self.items[0].unit_price.currency

    def subtotal(self) -> Money:
        """Somme exacte des prix unitaires x quantités, de gauche à droite."""
        total = Money.zero(self.currency)
        for item in self.items:
            total = total + item.line_total()
        return total


class DeliveryAddress(BaseModel):
    """Adresse de livraison. Seul le code postal influe sur le prix."""
    model_config = ConfigDict(frozen=True)

    full_name: str
    address_line_1: str
    address_line_2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    phone: str

    @field_validator("postal_code")
    @classmethod
    def _strip_postal_code(cls, value: str) -> str:
        return value.strip()

    def one_line(self) -> str:
        """Adresse sur une ligne, champs vides ignorés (format de la facture)."""
        parts = [self.address_line_1, self.address_line_2, self.city, self.state, self.postal_code]
        return ", ".join(part for part in parts if part)


# --- Modèles de taxe ---

class NoTax(BaseModel):
    """Aucune taxe (parcours remise régionale)."""
    model_config = ConfigDict(frozen=True)
    kind: Literal["none"] = "none"


class SplitGST(BaseModel):
    """GST à taux fixe, affichée en deux moitiés égales (CGST / SGST)."""
    model_config = ConfigDict(frozen=True)
    kind: Literal["split_gst"] = "split_gst"
    rate: Decimal = Field(..., ge=0, le=1)


TaxModel = Annotated[Union[NoTax, SplitGST], Field(discriminator="kind")]


class PolicyConfig(BaseModel):
    """Configuration tarifaire versionnée, fournie par l'environnement."""
    model_config = ConfigDict(frozen=True)

    version: Optional[str] = None
    currency: str = DEFAULT_CURRENCY
    regional_prefix: str = Field(default="795", min_length=1) # Codes postaux du Manipur
    regional_discount_rate: Decimal = Field(default=Decimal("0.10"), ge=0, le=1)
    regional_delivery_charge: Money = Field(default_factory=lambda: Money.of("80"))
    default_handling_fee: Money = Field(default_factory=Money.zero)
    tax_model: TaxModel = Field(default_factory=NoTax)


class PriceBreakdown(BaseModel):
    """Détail de prix d'une commande, toujours cohérent avec son total."""
    model_config = ConfigDict(frozen=True)

    subtotal: Money
    discount: Money
    delivery_charge: Money
    handling_fee: Money
    tax: Money
    tax_half_a: Optional[Money] = None
    tax_half_b: Optional[Money] = None
    total: Money
    deferred_delivery_note: bool = False # Livraison facturée plus tard (au poids): total provisoire
    is_discount_region: bool = False
    discount_rate: Decimal = Decimal("0")
    tax_model: TaxModel = Field(default_factory=NoTax)
    config_version: str

    @model_validator(mode="after")
    def _check_total(self) -> "PriceBreakdown":
        expected = self.subtotal - self.discount + self.delivery_charge + self.handling_fee + self.tax
        if expected != self.total:
            raise BreakdownInvariantViolation(
                f"Total incohérent: {self.total} enregistré, {expected} attendu."
            )
        if (self.tax_half_a is None) != (self.tax_half_b is None):
            raise BreakdownInvariantViolation("Les deux moitiés de taxe doivent être présentes ensemble.")
        if self.tax_half_a is not None and self.tax_half_a + self.tax_half_b != self.tax:
            raise BreakdownInvariantViolation("La somme des moitiés de taxe diffère de la taxe.")
        return self

    @property
    def is_provisional(self) -> bool:
        return self.deferred_delivery_note
