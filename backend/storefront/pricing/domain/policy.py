"""
Politique tarifaire: seule source de vérité pour le total d'une commande.

Fonction pure: (LineItemSet, DeliveryAddress, PolicyConfig) -> PriceBreakdown.
Aucun accès base de données ni réseau, testable de manière isolée.
"""
import logging
from typing import Optional

from storefront.core.exceptions import CurrencyMismatch
from storefront.core.money import Money
from storefront.pricing.domain.entities import (
    DeliveryAddress, LineItemSet, PolicyConfig, PriceBreakdown, SplitGST
)
from storefront.pricing.domain.exceptions import ConfigVersionMissing

logger = logging.getLogger(__name__)


def is_discount_region(address: DeliveryAddress, config: PolicyConfig) -> bool:
    """Unique point de branchement de tous les effets régionaux."""
    return address.postal_code.startswith(config.regional_prefix)


def compute_breakdown(
    items: LineItemSet,
    address: DeliveryAddress,
    config: PolicyConfig,
    handling_fee_override: Optional[Money] = None,
) -> PriceBreakdown:
    """Calcule le détail de prix d'une commande.

    Args:
        items: Lignes de commande validées.
        address: Adresse de livraison (seul le code postal est lu).
        config: Configuration tarifaire versionnée.
        handling_fee_override: Frais de manutention propres à la commande, prioritaires
            sur la valeur par défaut de la configuration.

    Returns:
        PriceBreakdown dont le total respecte
        total == subtotal - discount + delivery_charge + handling_fee + tax.

    Raises:
        ConfigVersionMissing: Si la configuration n'a pas de version.
        CurrencyMismatch: Si les lignes et la configuration n'ont pas la même devise.
        NegativeResult: Si une soustraction passerait sous zéro.
    """
    if not config.version or not config.version.strip():
        raise ConfigVersionMissing()

    subtotal = items.subtotal()
    if subtotal.currency != config.currency:
        raise CurrencyMismatch(subtotal.currency, config.currency)
    zero = Money.zero(config.currency)

    in_region = is_discount_region(address, config)
    if in_region:
        discount = min(subtotal.scale(config.regional_discount_rate), subtotal)
        delivery_charge = config.regional_delivery_charge
    else:
        # Hors région la livraison est facturée au poids, après coup: total provisoire.
        discount = zero
        delivery_charge = zero

    handling_fee = handling_fee_override if handling_fee_override is not None else config.default_handling_fee

    tax_half_a = tax_half_b = None
    if isinstance(config.tax_model, SplitGST):
        tax = subtotal.scale(config.tax_model.rate)
        tax_half_a, tax_half_b = tax.split_in_two()
    else:
        tax = zero

    total = subtotal - discount + delivery_charge + handling_fee + tax

    logger.debug(
        f"[PricingPolicy] v{config.version} code postal {address.postal_code} "
        f"(région: {in_region}) -> sous-total {subtotal}, total {total}"
    )
    return PriceBreakdown(
        subtotal=subtotal,
        discount=discount,
        delivery_charge=delivery_charge,
        handling_fee=handling_fee,
        tax=tax,
        tax_half_a=tax_half_a,
        tax_half_b=tax_half_b,
        total=total,
        deferred_delivery_note=not in_region,
        is_discount_region=in_region,
        discount_rate=config.regional_discount_rate,
        tax_model=config.tax_model,
        config_version=config.version,
    )
