"""
Unit tests for pharmacy stock and restock orders.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest
from django.utils import timezone

from clinic.entities import stock_status
from clinic.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from clinic.services.pharmacy import PharmacyInventoryManager, can_advance

NOW = timezone.make_aware(datetime(2024, 1, 22, 10, 0))
TODAY = date(2024, 1, 22)


class RecordingSink:
    def __init__(self):
        self.events = []

    def publish(self, type, title, message, related_id=None):
        self.events.append((type, title, message, related_id))


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def pharmacy(sink):
    return PharmacyInventoryManager(events=sink, clock=lambda: NOW)


@pytest.fixture
def amoxicillin(pharmacy):
    return pharmacy.upsert_product({
        'id': 'prod-2',
        'name': 'Amoxicillin 500mg',
        'category': 'Antibiotics',
        'quantity': 15,
        'min_stock': 50,
        'unit': 'capsules',
        'price': '0.80',
        'supplier': 'MedSupply Co.',
    })


@pytest.mark.parametrize('quantity,min_stock,expected', [
    (0, 0, 'out_of_stock'),
    (0, 10, 'out_of_stock'),
    (15, 50, 'low_stock'),
    (49, 50, 'low_stock'),
    (50, 50, 'in_stock'),
    (215, 50, 'in_stock'),
    (1, 0, 'in_stock'),
])
def test_stock_status(quantity, min_stock, expected):
    assert stock_status(quantity, min_stock) == expected


def test_upsert_creates_product_with_derived_status(amoxicillin, sink):
    assert amoxicillin.status == 'low_stock'
    assert amoxicillin.price == Decimal('0.80')
    assert amoxicillin.last_restocked == TODAY
    assert sink.events[0][0] == 'pharmacy'
    assert sink.events[0][3] == 'prod-2'


def test_upsert_generates_id_when_missing(pharmacy):
    product = pharmacy.upsert_product({'name': 'Saline', 'quantity': 10, 'min_stock': 5})
    assert product.id.startswith('prod-')
    assert pharmacy.get_product(product.id) == product


def test_upsert_accepts_numeric_id(pharmacy):
    product = pharmacy.upsert_product({'id': 7, 'name': 'Saline', 'quantity': 10, 'min_stock': 5})
    assert product.id == '7'
    assert pharmacy.upsert_product({'id': 7, 'quantity': 20}).name == 'Saline'
    assert len(pharmacy.list_products()) == 1


def test_set_stock_replaces_quantity(pharmacy, amoxicillin, sink):
    counted = pharmacy.set_stock('prod-2', 0)
    assert counted.quantity == 0
    assert counted.status == 'out_of_stock'
    assert counted.name == amoxicillin.name
    assert sink.events[-1][2] == 'Amoxicillin 500mg is out of stock'
    with pytest.raises(ValidationError):
        pharmacy.set_stock('prod-2', -4)
    with pytest.raises(NotFoundError):
        pharmacy.set_stock('prod-404', 10)
    assert [p.id for p in pharmacy.list_products()] == ['prod-2']


def test_upsert_ignores_supplied_status(pharmacy):
    product = pharmacy.upsert_product({
        'id': 'prod-x', 'name': 'Gauze', 'quantity': 0, 'min_stock': 5, 'status': 'in_stock',
    })
    assert product.status == 'out_of_stock'


def test_upsert_merges_into_existing_product(pharmacy, amoxicillin):
    updated = pharmacy.upsert_product({'id': 'prod-2', 'quantity': 80})
    assert updated.quantity == 80
    assert updated.status == 'in_stock'
    assert updated.name == amoxicillin.name
    assert updated.supplier == amoxicillin.supplier


def test_upsert_is_idempotent(pharmacy, amoxicillin):
    data = {'id': 'prod-2', 'name': 'Amoxicillin 500mg', 'quantity': 15, 'min_stock': 50, 'price': '0.80'}
    first = pharmacy.upsert_product(data)
    second = pharmacy.upsert_product(data)
    assert first == second
    assert len(pharmacy.list_products()) == 1


@pytest.mark.parametrize('data,field', [
    ({'name': '', 'quantity': 1, 'min_stock': 1}, 'name'),
    ({'name': 'X', 'quantity': -1, 'min_stock': 1}, 'quantity'),
    ({'name': 'X', 'quantity': 1, 'min_stock': -3}, 'min_stock'),
    ({'name': 'X', 'quantity': 'lots', 'min_stock': 1}, 'quantity'),
    ({'name': 'X', 'quantity': 1.5, 'min_stock': 1}, 'quantity'),
    ({'name': 'X', 'min_stock': 1}, 'quantity'),
    ({'name': 'X', 'quantity': 1, 'min_stock': 1, 'price': '-2'}, 'price'),
    ({'name': 'X', 'quantity': 1, 'min_stock': 1, 'price': 'free'}, 'price'),
])
def test_upsert_rejects_invalid_product(pharmacy, data, field):
    with pytest.raises(ValidationError) as exc:
        pharmacy.upsert_product(data)
    assert exc.value.field == field
    assert pharmacy.list_products() == []


def test_invalid_update_leaves_product_unchanged(pharmacy, amoxicillin):
    with pytest.raises(ValidationError):
        pharmacy.upsert_product({'id': 'prod-2', 'quantity': -5})
    assert pharmacy.get_product('prod-2') == amoxicillin


def test_stock_alert_only_on_status_change(pharmacy, sink):
    pharmacy.upsert_product({'id': 'p', 'name': 'Gauze', 'quantity': 100, 'min_stock': 10})
    assert sink.events == []
    pharmacy.upsert_product({'id': 'p', 'quantity': 5})
    pharmacy.upsert_product({'id': 'p', 'quantity': 4})
    pharmacy.upsert_product({'id': 'p', 'quantity': 0})
    assert [e[2] for e in sink.events] == [
        'Gauze is running low (5 left, minimum 10)',
        'Gauze is out of stock',
    ]


def test_list_products_filters(pharmacy, amoxicillin):
    pharmacy.upsert_product({'id': 'prod-1', 'name': 'Paracetamol', 'category': 'Analgesics',
                             'quantity': 500, 'min_stock': 100})
    pharmacy.upsert_product({'id': 'prod-3', 'name': 'Insulin', 'category': 'Hormones',
                             'quantity': 0, 'min_stock': 20})
    assert [p.id for p in pharmacy.list_products(status='in_stock')] == ['prod-1']
    assert [p.id for p in pharmacy.list_products(query='antibio')] == ['prod-2']
    assert {p.id for p in pharmacy.low_stock()} == {'prod-2', 'prod-3'}
    with pytest.raises(ValidationError):
        pharmacy.list_products(status='plenty')


def test_restock(pharmacy, amoxicillin):
    updated = pharmacy.restock('prod-2', 40)
    assert updated.quantity == 55
    assert updated.status == 'in_stock'
    with pytest.raises(ValidationError):
        pharmacy.restock('prod-2', 0)
    with pytest.raises(NotFoundError):
        pharmacy.restock('prod-missing', 5)


def test_remove_product(pharmacy, amoxicillin):
    pharmacy.remove_product('prod-2')
    with pytest.raises(NotFoundError):
        pharmacy.get_product('prod-2')
    with pytest.raises(NotFoundError):
        pharmacy.remove_product('prod-2')


def test_place_order(pharmacy, amoxicillin):
    order = pharmacy.place_order('prod-2', 200)
    assert order.status == 'pending'
    assert order.product_name == 'Amoxicillin 500mg'
    assert order.supplier == 'MedSupply Co.'
    assert order.total_cost == Decimal('160.00')
    assert order.order_date == TODAY
    assert pharmacy.pending_orders() == [order]


def test_place_order_validation(pharmacy, amoxicillin):
    with pytest.raises(NotFoundError):
        pharmacy.place_order('prod-missing', 10)
    with pytest.raises(ValidationError):
        pharmacy.place_order('prod-2', 0)
    assert pharmacy.list_orders() == []


def test_total_cost_is_fixed_at_order_time(pharmacy, amoxicillin):
    order = pharmacy.place_order('prod-2', 100)
    pharmacy.upsert_product({'id': 'prod-2', 'price': '2.50'})
    assert pharmacy.get_order(order.id).total_cost == Decimal('80.00')


def test_delivery_restocks_product(pharmacy, amoxicillin):
    order = pharmacy.place_order('prod-2', 200)
    pharmacy.advance_order_status(order.id, 'confirmed')
    delivered = pharmacy.advance_order_status(order.id, 'delivered')
    product = pharmacy.get_product('prod-2')
    assert delivered.status == 'delivered'
    assert product.quantity == 215
    assert product.status == 'in_stock'
    assert product.last_restocked == TODAY


def test_delivery_is_applied_once(pharmacy, amoxicillin):
    order = pharmacy.place_order('prod-2', 200)
    pharmacy.advance_order_status(order.id, 'confirmed')
    pharmacy.advance_order_status(order.id, 'delivered')
    with pytest.raises(InvalidTransitionError):
        pharmacy.advance_order_status(order.id, 'delivered')
    assert pharmacy.get_product('prod-2').quantity == 215


def test_pending_order_cannot_skip_confirmation(pharmacy, amoxicillin):
    order = pharmacy.place_order('prod-2', 200)
    with pytest.raises(InvalidTransitionError):
        pharmacy.advance_order_status(order.id, 'delivered')
    assert pharmacy.get_order(order.id).status == 'pending'
    assert pharmacy.get_product('prod-2').quantity == 15


def test_delivery_of_removed_product_leaves_order_untouched(pharmacy, amoxicillin):
    order = pharmacy.place_order('prod-2', 200)
    pharmacy.advance_order_status(order.id, 'confirmed')
    pharmacy.remove_product('prod-2')
    with pytest.raises(NotFoundError):
        pharmacy.advance_order_status(order.id, 'delivered')
    assert pharmacy.get_order(order.id).status == 'confirmed'


def test_cancel_order(pharmacy, amoxicillin):
    order = pharmacy.place_order('prod-2', 20)
    cancelled = pharmacy.cancel_order(order.id)
    assert cancelled.status == 'cancelled'
    assert pharmacy.pending_orders() == []
    with pytest.raises(InvalidTransitionError):
        pharmacy.advance_order_status(order.id, 'confirmed')
    assert pharmacy.get_product('prod-2').quantity == 15


def test_unknown_order_status_is_a_validation_error(pharmacy, amoxicillin):
    order = pharmacy.place_order('prod-2', 20)
    with pytest.raises(ValidationError):
        pharmacy.advance_order_status(order.id, 'shipped')
    with pytest.raises(NotFoundError):
        pharmacy.advance_order_status('order-missing', 'confirmed')


def test_order_state_machine_table():
    assert can_advance('pending', 'confirmed')
    assert can_advance('pending', 'cancelled')
    assert can_advance('confirmed', 'delivered')
    assert can_advance('confirmed', 'cancelled')
    assert not can_advance('pending', 'delivered')
    assert not can_advance('delivered', 'cancelled')
    assert not can_advance('cancelled', 'pending')


def test_summary(pharmacy, amoxicillin):
    pharmacy.upsert_product({'id': 'prod-3', 'name': 'Insulin', 'quantity': 0, 'min_stock': 20})
    pharmacy.upsert_product({'id': 'prod-1', 'name': 'Paracetamol', 'quantity': 500, 'min_stock': 100})
    first = pharmacy.place_order('prod-2', 10)
    pharmacy.place_order('prod-3', 10)
    pharmacy.cancel_order(first.id)
    assert pharmacy.summary() == {'inStock': 1, 'lowStock': 1, 'outOfStock': 1, 'openOrders': 1}
