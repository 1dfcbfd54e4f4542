"""
Tests pour l'agrégat OrderAggregate (création, exécution, contrôle tarifaire).
"""
from datetime import datetime, timezone

import pytest

from storefront.core.money import Money
from storefront.fulfillment.domain.entities import (
    CourierInfo, FulfillmentRequest, FulfillmentState, OrderStatus, ShippingStatus
)
from storefront.fulfillment.domain.exceptions import IllegalTransition, MissingCourierInfo
from storefront.orders.domain.entities import Customer, OrderAggregate
from storefront.orders.domain.exceptions import InvalidCustomer, PricingDrift, StaleState
from storefront.pricing.domain.entities import LineItem, LineItemSet
from storefront.pricing.domain.exceptions import ConfigVersionMismatch

PLACED_AT = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def items() -> LineItemSet:
    return LineItemSet.of([
        LineItem(product_id="ghee-500", product_name="Cow Ghee 500 g", unit_price=Money.of("500"), quantity=2),
    ])


@pytest.fixture
def order(items, manipur_address, regional_config) -> OrderAggregate:
    return OrderAggregate.place(
        items,
        manipur_address,
        Customer(user_id="user-42", email="user42@example.com"),
        regional_config,
        order_id="3f2a9c1e-0000-4000-8000-000000000001",
        now=PLACED_AT,
    )


def _confirmed_packed(order: OrderAggregate) -> OrderAggregate:
    order = order.update_fulfillment(
        order.fulfillment,
        FulfillmentRequest(order_status=OrderStatus.CONFIRMED, shipping_status=ShippingStatus.PACKED),
    )
    return order


def test_place_captures_breakdown_and_initial_state(order):
    assert order.breakdown.total == Money.of("980")
    assert order.breakdown.config_version == "test-regional-v1"
    assert order.fulfillment == FulfillmentState.initial()
    assert order.version == 1
    assert order.created_at == order.updated_at == PLACED_AT


def test_guest_customer_needs_a_name():
    with pytest.raises(InvalidCustomer):
        Customer(email="guest@example.com")


def test_display_name_falls_back_to_recipient_then_guest(manipur_address):
    assert Customer(user_id="u1", name="Profile Name").display_name(manipur_address) == "Profile Name"
    assert Customer(user_id="u1").display_name(manipur_address) == "Thoibi Devi"
    assert Customer(user_id="u1").display_name() == "Guest Customer"


def test_shipping_without_courier_leaves_order_untouched(order):
    packed = _confirmed_packed(order)

    with pytest.raises(MissingCourierInfo):
        packed.update_fulfillment(
            packed.fulfillment,
            FulfillmentRequest(order_status=OrderStatus.CONFIRMED, shipping_status=ShippingStatus.SHIPPED),
        )
    assert packed.fulfillment.shipping_status == ShippingStatus.PACKED
    assert packed.fulfillment.courier is None
    assert packed.version == 2


def test_update_fulfillment_changes_only_fulfillment_fields(order):
    courier = CourierInfo(courier_name="Blue Dart", courier_contact="1800-233-1234", tracking_id="BD1")
    packed = _confirmed_packed(order)
    shipped = packed.update_fulfillment(
        packed.fulfillment,
        FulfillmentRequest(order_status=OrderStatus.CONFIRMED, shipping_status=ShippingStatus.SHIPPED, courier=courier),
    )

    assert shipped.fulfillment.shipping_status == ShippingStatus.SHIPPED
    assert shipped.fulfillment.courier == courier
    assert shipped.version == 3
    assert shipped.breakdown == order.breakdown
    assert shipped.items == order.items
    assert shipped.created_at == order.created_at


def test_stale_current_state_is_rejected(order):
    packed = _confirmed_packed(order)

    with pytest.raises(StaleState):
        packed.update_fulfillment(
            FulfillmentState.initial(),
            FulfillmentRequest(order_status=OrderStatus.CANCELLED, shipping_status=ShippingStatus.PENDING),
        )


def test_illegal_transition_propagates(order):
    with pytest.raises(IllegalTransition):
        order.update_fulfillment(
            order.fulfillment,
            FulfillmentRequest(order_status=OrderStatus.REFUNDED, shipping_status=ShippingStatus.PENDING),
        )


def test_recompute_with_recorded_config_has_no_drift(order, regional_config):
    check = order.recompute_for_display(regional_config)

    assert check.has_drift is False
    assert check.recomputed == check.stored


def test_recompute_with_other_version_is_refused(order, gst_config):
    with pytest.raises(ConfigVersionMismatch):
        order.recompute_for_display(gst_config)


def test_drift_is_reported_as_warning_not_error(order, regional_config):
    # Même version, valeurs modifiées après coup: la dérive doit être signalée
    tampered = regional_config.model_copy(update={"regional_delivery_charge": Money.of("100")})

    with pytest.warns(PricingDrift):
        check = order.recompute_for_display(tampered)

    assert check.has_drift is True
    assert "delivery_charge" in check.drifted_fields
    assert "total" in check.drifted_fields
    assert order.breakdown.total == Money.of("980")
