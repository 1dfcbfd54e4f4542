import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from fastcrud import FastCRUD
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col

from storefront.core.money import Money
from storefront.fulfillment.domain.entities import CourierInfo, FulfillmentState, OrderStatus, ShippingStatus
from storefront.orders.domain.entities import Customer, OrderAggregate, PaymentMethod
from storefront.orders.domain.exceptions import OrderNotFound, StaleState
from storefront.orders.domain.repositories import AbstractOrderRepository
from storefront.orders.infrastructure.orm_models import OrderRecord
from storefront.pricing.domain.entities import DeliveryAddress, LineItemSet, PriceBreakdown

logger = logging.getLogger(__name__)


def _minor(money: Optional[Money]) -> Optional[int]:
    return money.minor_units if money is not None else None


def _money(minor_units: Optional[int], currency: str) -> Optional[Money]:
    return Money.from_minor_units(minor_units, currency) if minor_units is not None else None


def order_to_record_fields(order: OrderAggregate) -> Dict[str, Any]:
    """Convertit l'agrégat en colonnes de la table `orders`."""
    breakdown = order.breakdown
    courier = order.fulfillment.courier
    return {
        "id": order.id,
        "customer_user_id": order.customer.user_id,
        "customer_name": order.customer.name,
        "customer_email": order.customer.email,
        "customer_phone": order.customer.phone,
        "items": [item.model_dump(mode="json") for item in order.items.items],
        "delivery_address": order.address.model_dump(mode="json"),
        "payment_method": order.payment_method.value,
        "payment_reference": order.payment_reference,
        "currency": breakdown.total.currency,
        "config_version": breakdown.config_version,
        "subtotal_minor": breakdown.subtotal.minor_units,
        "discount_minor": breakdown.discount.minor_units,
        "delivery_charge_minor": breakdown.delivery_charge.minor_units,
        "handling_fee_minor": breakdown.handling_fee.minor_units,
        "handling_fee_override_minor": _minor(order.handling_fee_override),
        "tax_minor": breakdown.tax.minor_units,
        "tax_half_a_minor": _minor(breakdown.tax_half_a),
        "tax_half_b_minor": _minor(breakdown.tax_half_b),
        "total_minor": breakdown.total.minor_units,
        "deferred_delivery_note": breakdown.deferred_delivery_note,
        "is_discount_region": breakdown.is_discount_region,
        "discount_rate": str(breakdown.discount_rate),
        "tax_model": breakdown.tax_model.model_dump(mode="json"),
        "order_status": order.fulfillment.order_status.value,
        "shipping_status": order.fulfillment.shipping_status.value,
        "courier_name": courier.courier_name if courier else None,
        "courier_contact": courier.courier_contact if courier else None,
        "tracking_id": courier.tracking_id if courier else None,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "version": order.version,
    }


def record_to_order(row: Mapping[str, Any]) -> OrderAggregate:
    """Réhydrate un agrégat depuis une ligne de la table `orders` (ORM ou dict)."""
    currency = row["currency"]
    breakdown = PriceBreakdown(
        subtotal=_money(row["subtotal_minor"], currency),
        discount=_money(row["discount_minor"], currency),
        delivery_charge=_money(row["delivery_charge_minor"], currency),
        handling_fee=_money(row["handling_fee_minor"], currency),
        tax=_money(row["tax_minor"], currency),
        tax_half_a=_money(row["tax_half_a_minor"], currency),
        tax_half_b=_money(row["tax_half_b_minor"], currency),
        total=_money(row["total_minor"], currency),
        deferred_delivery_note=row["deferred_delivery_note"],
        is_discount_region=row["is_discount_region"],
        discount_rate=Decimal(row["discount_rate"]),
        tax_model=row["tax_model"],
        config_version=row["config_version"],
    )
    fulfillment = FulfillmentState(
        order_status=OrderStatus(row["order_status"]),
        shipping_status=ShippingStatus(row["shipping_status"]),
        courier=CourierInfo.from_fields(row["courier_name"], row["courier_contact"], row["tracking_id"]),
    )
    return OrderAggregate(
        id=row["id"],
        customer=Customer(
            user_id=row["customer_user_id"],
            name=row["customer_name"],
            email=row["customer_email"],
            phone=row["customer_phone"],
        ),
        items=LineItemSet(items=row["items"]),
        address=DeliveryAddress.model_validate(row["delivery_address"]),
        breakdown=breakdown,
        handling_fee_override=_money(row["handling_fee_override_minor"], currency),
        fulfillment=fulfillment,
        payment_method=PaymentMethod(row["payment_method"]),
        payment_reference=row["payment_reference"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        version=row["version"],
    )


class SQLAlchemyOrderRepository(AbstractOrderRepository):
    """Implémentation SQLAlchemy du repository des commandes (FastCRUD pour la pagination)."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud_order = FastCRUD(OrderRecord)

    async def save(self, order: OrderAggregate) -> OrderAggregate:
        logger.debug(f"[OrderRepository] Enregistrement commande {order.id}")
        self.db.add(OrderRecord(**order_to_record_fields(order)))
        try:
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[OrderRepository] Erreur enregistrement commande {order.id}: {e}", exc_info=True)
            raise
        logger.info(f"[OrderRepository] Commande {order.id} enregistrée ({len(order.items.items)} lignes).")
        return order

    async def _get_record(self, order_id: str) -> Optional[OrderRecord]:
        stmt = (
            select(OrderRecord)
            .where(col(OrderRecord.id) == order_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def load(self, order_id: str) -> OrderAggregate:
        logger.debug(f"[OrderRepository] Lecture commande {order_id}")
        record = await self._get_record(order_id)
        if record is None:
            logger.warning(f"[OrderRepository] Commande {order_id} non trouvée.")
            raise OrderNotFound(order_id)
        return record_to_order(record.model_dump())

    async def list_by_customer(self, customer_id: str, limit: int, offset: int) -> Tuple[List[OrderAggregate], int]:
        logger.debug(f"[OrderRepository] Listage commandes client {customer_id}, limit={limit}, offset={offset}")
        result = await self.crud_order.get_multi(
            db=self.db,
            offset=offset,
            limit=limit,
            sort_columns="created_at",
            sort_orders="desc",
            customer_user_id=customer_id,
        )
        orders = [record_to_order(row) for row in result.get("data", [])]
        return orders, result.get("total_count", len(orders))

    async def list_all(self, limit: int, offset: int, search: Optional[str] = None) -> Tuple[List[OrderAggregate], int]:
        logger.debug(f"[OrderRepository] Listage admin, limit={limit}, offset={offset}, recherche={search!r}")
        stmt = select(OrderRecord)
        count_stmt = select(func.count()).select_from(OrderRecord)
        if search:
            criterion = func.lower(col(OrderRecord.id)).contains(search.strip().lower())
            stmt = stmt.where(criterion)
            count_stmt = count_stmt.where(criterion)
        stmt = (
            stmt.order_by(col(OrderRecord.created_at).desc())
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        records = (await self.db.execute(stmt)).scalars().all()
        total = (await self.db.execute(count_stmt)).scalar_one()
        return [record_to_order(record.model_dump()) for record in records], total

    async def save_fulfillment(self, order: OrderAggregate, expected_version: int) -> OrderAggregate:
        courier = order.fulfillment.courier
        stmt = (
            update(OrderRecord)
            .where(col(OrderRecord.id) == order.id, col(OrderRecord.version) == expected_version)
            .values(
                order_status=order.fulfillment.order_status.value,
                shipping_status=order.fulfillment.shipping_status.value,
                courier_name=courier.courier_name if courier else None,
                courier_contact=courier.courier_contact if courier else None,
                tracking_id=courier.tracking_id if courier else None,
                updated_at=order.updated_at,
                version=order.version,
            )
        )
        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                if await self._get_record(order.id) is None:
                    raise OrderNotFound(order.id)
                logger.warning(
                    f"[OrderRepository] Écriture concurrente détectée sur la commande {order.id} "
                    f"(version attendue {expected_version})."
                )
                raise StaleState(order.id, f"version attendue {expected_version}")
            await self.db.commit()
        except (OrderNotFound, StaleState):
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[OrderRepository] Erreur MAJ exécution commande {order.id}: {e}", exc_info=True)
            raise
        logger.info(
            f"[OrderRepository] Commande {order.id} -> {order.fulfillment.order_status.value}/"
            f"{order.fulfillment.shipping_status.value} (version {order.version})."
        )
        return order
