from datetime import datetime, timedelta, timezone

import pytest

from storefront.core.money import Money
from storefront.fulfillment.domain.entities import (
    CourierInfo, FulfillmentRequest, OrderStatus, ShippingStatus
)
from storefront.orders.domain.entities import Customer, OrderAggregate, PaymentMethod
from storefront.orders.domain.exceptions import OrderNotFound, StaleState
from storefront.orders.infrastructure.persistence import SQLAlchemyOrderRepository
from storefront.pricing.domain.entities import LineItem, LineItemSet

pytestmark = pytest.mark.asyncio

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def _place(order_id, address, config, customer=None, minutes=0, **kwargs) -> OrderAggregate:
    items = LineItemSet.of([
        LineItem(product_id="ghee-500", product_name="Cow Ghee 500 g", unit_price=Money.of("500"), quantity=2),
        LineItem(product_id="pickle-250", product_name="King Chilli Pickle", unit_price=Money.of("175.50"), quantity=1),
    ])
    return OrderAggregate.place(
        items,
        address,
        customer or Customer(user_id="user-42"),
        config,
        order_id=order_id,
        now=BASE_TIME + timedelta(minutes=minutes),
        **kwargs,
    )


async def test_saved_order_is_read_back_verbatim(db_session, manipur_address, gst_config):
    repo = SQLAlchemyOrderRepository(db_session)
    order = _place(
        "aaaa1111-0000-4000-8000-000000000001", manipur_address, gst_config,
        customer=Customer(name="Walk-in Guest", phone="9800000009"),
        handling_fee_override=Money.of("25"),
        payment_method=PaymentMethod.UPI,
        payment_reference="https://example.com/upi/screenshot.png",
    )
    await repo.save(order)

    loaded = await repo.load(order.id)

    assert loaded.breakdown == order.breakdown
    assert loaded.items == order.items
    assert loaded.address == order.address
    assert loaded.customer == order.customer
    assert loaded.handling_fee_override == Money.of("25")
    assert loaded.fulfillment == order.fulfillment
    assert loaded.payment_method == PaymentMethod.UPI
    assert loaded.payment_reference == order.payment_reference
    assert loaded.version == 1


async def test_load_unknown_order_raises(db_session):
    repo = SQLAlchemyOrderRepository(db_session)
    with pytest.raises(OrderNotFound):
        await repo.load("missing")


async def test_list_by_customer_is_paginated_newest_first(db_session, manipur_address, regional_config):
    repo = SQLAlchemyOrderRepository(db_session)
    for index in range(3):
        await repo.save(_place(f"cust-order-{index}", manipur_address, regional_config, minutes=index))
    await repo.save(_place(
        "other-order", manipur_address, regional_config, customer=Customer(user_id="someone-else"),
    ))

    orders, total = await repo.list_by_customer("user-42", limit=2, offset=0)

    assert total == 3
    assert [order.id for order in orders] == ["cust-order-2", "cust-order-1"]


async def test_list_all_searches_by_id_fragment(db_session, manipur_address, regional_config):
    repo = SQLAlchemyOrderRepository(db_session)
    await repo.save(_place("abc12345-0000", manipur_address, regional_config))
    await repo.save(_place("abd99999-0000", manipur_address, regional_config, minutes=1))

    orders, total = await repo.list_all(limit=10, offset=0, search="ABC")
    assert total == 1
    assert orders[0].id == "abc12345-0000"

    orders, total = await repo.list_all(limit=10, offset=0, search="C123")
    assert total == 1
    assert orders[0].id == "abc12345-0000"

    orders, total = await repo.list_all(limit=10, offset=0, search="-0000")
    assert total == 2

    orders, total = await repo.list_all(limit=10, offset=0)
    assert total == 2
    assert orders[0].id == "abd99999-0000"


async def test_save_fulfillment_persists_new_state(db_session, manipur_address, regional_config):
    repo = SQLAlchemyOrderRepository(db_session)
    order = _place("ship-me", manipur_address, regional_config)
    await repo.save(order)

    courier = CourierInfo(courier_name="India Post", courier_contact="1800-266-6868", tracking_id="EE123IN")
    updated = order.update_fulfillment(
        order.fulfillment,
        FulfillmentRequest(order_status=OrderStatus.CONFIRMED, shipping_status=ShippingStatus.SHIPPED, courier=courier),
    )
    await repo.save_fulfillment(updated, expected_version=order.version)

    loaded = await repo.load("ship-me")
    assert loaded.fulfillment.shipping_status == ShippingStatus.SHIPPED
    assert loaded.fulfillment.courier == courier
    assert loaded.version == 2
    assert loaded.breakdown == order.breakdown


async def test_concurrent_fulfillment_write_is_rejected(db_session, manipur_address, regional_config):
    repo = SQLAlchemyOrderRepository(db_session)
    order = _place("race", manipur_address, regional_config)
    await repo.save(order)

    first = order.update_fulfillment(
        order.fulfillment,
        FulfillmentRequest(order_status=OrderStatus.CONFIRMED, shipping_status=ShippingStatus.PENDING),
    )
    second = order.update_fulfillment(
        order.fulfillment,
        FulfillmentRequest(order_status=OrderStatus.CANCELLED, shipping_status=ShippingStatus.PENDING),
    )
    await repo.save_fulfillment(first, expected_version=1)

    with pytest.raises(StaleState):
        await repo.save_fulfillment(second, expected_version=1)

    loaded = await repo.load("race")
    assert loaded.fulfillment.order_status == OrderStatus.CONFIRMED


async def test_save_fulfillment_for_unknown_order(db_session, manipur_address, regional_config):
    repo = SQLAlchemyOrderRepository(db_session)
    order = _place("never-saved", manipur_address, regional_config)
    updated = order.update_fulfillment(
        order.fulfillment,
        FulfillmentRequest(order_status=OrderStatus.CONFIRMED, shipping_status=ShippingStatus.PENDING),
    )
    with pytest.raises(OrderNotFound):
        await repo.save_fulfillment(updated, expected_version=1)
