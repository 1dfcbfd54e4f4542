import logging
from typing import List, Optional, Sequence, Tuple

from storefront.catalog.domain.repositories import AbstractCatalogLookup
from storefront.orders.application.schemas import (
    CheckoutPreviewRequest, FulfillmentUpdate, OrderCreate, OrderItemCreate
)
from storefront.orders.domain.entities import OrderAggregate, PricingCheck
from storefront.orders.domain.repositories import AbstractOrderRepository
from storefront.pricing.domain.entities import LineItem, LineItemSet, PolicyConfig, PriceBreakdown
from storefront.pricing.domain.exceptions import InvalidLineItem
from storefront.pricing.domain.policy import compute_breakdown
from storefront.pricing.domain.repositories import AbstractPolicyConfigRepository

logger = logging.getLogger(__name__)


class OrderService:
    """Service applicatif pour la gestion des commandes.

    Les collaborateurs externes (stockage, catalogue, registre des configurations)
    sont injectés explicitement; aucun client global n'est utilisé.
    """

    def __init__(self,
                 order_repo: AbstractOrderRepository,
                 catalog: AbstractCatalogLookup,
                 policy_repo: AbstractPolicyConfigRepository,
                 policy_config: PolicyConfig):
        self.order_repo = order_repo
        self.catalog = catalog
        self.policy_repo = policy_repo
        self.policy_config = policy_config # Configuration en vigueur

    async def _build_line_items(self, requested: Sequence[OrderItemCreate]) -> LineItemSet:
        """Fige prix et nom depuis le catalogue. Seul moment où le catalogue est consulté."""
        if not requested:
            raise InvalidLineItem("Impossible de créer une commande sans articles.")
        items: List[LineItem] = []
        for item_in in requested:
            if item_in.quantity <= 0:
                raise InvalidLineItem(
                    f"Quantité invalide ({item_in.quantity}) pour le produit '{item_in.product_id}'."
                )
            product = await self.catalog.get_product(item_in.product_id)
            items.append(LineItem(
                product_id=product.id,
                product_name=product.name,
                unit_price=product.unit_price,
                quantity=item_in.quantity,
            ))
        return LineItemSet.of(items)

    async def preview(self, preview_data: CheckoutPreviewRequest) -> PriceBreakdown:
        """Aperçu du checkout: même calcul que la commande, sans enregistrement."""
        items = await self._build_line_items(preview_data.items)
        return compute_breakdown(items, preview_data.address, self.policy_config)

    async def place_order(self, order_data: OrderCreate) -> OrderAggregate:
        """Crée et enregistre une commande avec la configuration en vigueur."""
        logger.info(f"[OrderService] Tentative création commande ({len(order_data.items)} lignes)")
        customer = order_data.customer.to_domain()
        items = await self._build_line_items(order_data.items)
        order = OrderAggregate.place(
            items,
            order_data.address,
            customer,
            self.policy_config,
            payment_method=order_data.payment_method,
            payment_reference=order_data.payment_reference,
        )
        # La version utilisée doit rester relisible pour les recalculs ultérieurs
        await self.policy_repo.register(self.policy_config)
        return await self.order_repo.save(order)

    async def get_order(self, order_id: str) -> OrderAggregate:
        logger.debug(f"[OrderService] Récupération commande ID: {order_id}")
        return await self.order_repo.load(order_id)

    async def list_customer_orders(self, customer_id: str, limit: int, offset: int) -> Tuple[List[OrderAggregate], int]:
        logger.debug(f"[OrderService] Listage commandes pour client: {customer_id}, limit: {limit}, offset: {offset}")
        return await self.order_repo.list_by_customer(customer_id, limit, offset)

    async def list_all_orders(self, limit: int, offset: int, search: Optional[str] = None) -> Tuple[List[OrderAggregate], int]:
        return await self.order_repo.list_all(limit, offset, search)

    async def update_fulfillment(self, order_id: str, update: FulfillmentUpdate) -> OrderAggregate:
        """Met à jour statuts et transporteur. Le prix n'est jamais recalculé ici."""
        logger.info(
            f"[OrderService] MAJ exécution commande {order_id} -> "
            f"{update.target.order_status.value}/{update.target.shipping_status.value}"
        )
        current = update.current.to_state()
        request = update.target.to_request()
        order = await self.order_repo.load(order_id)
        updated = order.update_fulfillment(current, request)
        return await self.order_repo.save_fulfillment(updated, expected_version=order.version)

    async def check_pricing(self, order_id: str) -> PricingCheck:
        """Recalcule la commande avec la version de configuration enregistrée à la création."""
        order = await self.order_repo.load(order_id)
        config = await self.policy_repo.get(order.breakdown.config_version)
        check = order.recompute_for_display(config)
        if not check.has_drift:
            logger.debug(f"[OrderService] Aucune dérive tarifaire pour la commande {order_id}.")
        return check
