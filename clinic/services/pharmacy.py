"""
Pharmacy stock and restock orders.

Products carry a derived stock badge (see :func:`clinic.entities.stock_status`)
that always follows their quantity.  Orders move forward through
``pending -> confirmed -> delivered`` or drop to ``cancelled`` while still
open.  Delivering an order restocks the product it references; the order
update and the restock happen together or not at all.
"""
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Mapping, Optional

from django.utils import timezone

from clinic.entities import (
    ORDER_CANCELLED,
    ORDER_CONFIRMED,
    ORDER_DELIVERED,
    ORDER_PENDING,
    ORDER_STATUS_CHOICES,
    STOCK_IN,
    STOCK_LOW,
    STOCK_OUT,
    STOCK_STATUS_CHOICES,
    PharmacyOrder,
    PharmacyProduct,
)
from clinic.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from clinic.services.notifications import EventSink, NullSink

logger = logging.getLogger(__name__)

ORDER_TRANSITIONS = {
    ORDER_PENDING: [ORDER_CONFIRMED, ORDER_CANCELLED],
    ORDER_CONFIRMED: [ORDER_DELIVERED, ORDER_CANCELLED],
    ORDER_DELIVERED: [],
    ORDER_CANCELLED: [],
}

PRODUCT_FIELDS = (
    'name', 'category', 'quantity', 'min_stock', 'unit', 'price', 'supplier', 'expiry_date', 'last_restocked',
)


def can_advance(current: str, new: str) -> bool:
    return new in ORDER_TRANSITIONS.get(current, [])


def _non_negative_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer', field=field)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer', field=field)
    if number != value and not isinstance(value, str):
        raise ValidationError(f'{field} must be an integer', field=field)
    if number < 0:
        raise ValidationError(f'{field} must not be negative', field=field)
    return number


def _price(value: Any) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError('price must be a number', field='price')
    if not price.is_finite() or price < 0:
        raise ValidationError('price must not be negative', field='price')
    return price


class PharmacyInventoryManager:
    """Product catalog and order book held in process memory."""

    def __init__(self, *, events: Optional[EventSink] = None, clock: Callable = timezone.now):
        self._events = events or NullSink()
        self._clock = clock
        self._lock = threading.RLock()
        self._products: dict[str, PharmacyProduct] = {}
        self._orders: dict[str, PharmacyOrder] = {}

    def _today(self) -> date:
        return timezone.localtime(self._clock()).date()

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def get_product(self, product_id: str) -> PharmacyProduct:
        with self._lock:
            product = self._products.get(product_id)
        if product is None:
            raise NotFoundError('product', product_id)
        return product

    def list_products(self, *, status: Optional[str] = None, query: Optional[str] = None) -> list[PharmacyProduct]:
        if status and status not in STOCK_STATUS_CHOICES:
            raise ValidationError(f'unknown stock status {status!r}', field='status')
        with self._lock:
            products = list(self._products.values())
        if status:
            products = [p for p in products if p.status == status]
        needle = (query or '').strip().lower()
        if needle:
            products = [
                p for p in products
                if needle in p.name.lower() or needle in p.category.lower() or needle in p.supplier.lower()
            ]
        return products

    def low_stock(self) -> list[PharmacyProduct]:
        return [p for p in self.list_products() if p.status in (STOCK_LOW, STOCK_OUT)]

    def upsert_product(self, data: Mapping[str, Any]) -> PharmacyProduct:
        """Create a product, or merge ``data`` into an existing one.

        ``data`` uses the snake_case field names of :class:`PharmacyProduct`.
        An ``id`` that is unknown creates a product under that id.  A
        ``status`` key is ignored: the badge is derived from quantity.
        """
        product_id = str(data.get('id') or '').strip()
        with self._lock:
            current = self._products.get(product_id) if product_id else None
            values = {f: getattr(current, f) for f in PRODUCT_FIELDS} if current else {
                'category': '', 'unit': '', 'supplier': '', 'price': Decimal('0'),
                'expiry_date': None, 'last_restocked': self._today(),
            }
            values.update({k: v for k, v in data.items() if k in PRODUCT_FIELDS})

            values['name'] = (values.get('name') or '').strip()
            if not values['name']:
                raise ValidationError('name must not be empty', field='name')
            for field in ('quantity', 'min_stock'):
                if values.get(field) is None:
                    raise ValidationError(f'{field} is required', field=field)
                values[field] = _non_negative_int(values[field], field)
            values['price'] = _price(values.get('price'))
            for field in ('category', 'unit', 'supplier'):
                values[field] = (values.get(field) or '').strip()

            product = PharmacyProduct(id=product_id or f'prod-{uuid.uuid4().hex[:12]}', **values)
            self._products[product.id] = product
        logger.info('%s product %s (qty=%s, status=%s)',
                    'Updated' if current else 'Created', product.id, product.quantity, product.status)
        self._alert_if_short(current, product)
        return product

    def set_stock(self, product_id: str, quantity: int) -> PharmacyProduct:
        """Stock count correction: replace the on-hand quantity of a known product."""
        with self._lock:
            self.get_product(product_id)
            return self.upsert_product({'id': product_id, 'quantity': quantity})

    def restock(self, product_id: str, quantity: int) -> PharmacyProduct:
        """Manual restock: add ``quantity`` units received outside an order."""
        amount = _non_negative_int(quantity, 'quantity')
        if amount == 0:
            raise ValidationError('quantity must be positive', field='quantity')
        with self._lock:
            product = self.get_product(product_id)
            updated = replace(product, quantity=product.quantity + amount, last_restocked=self._today())
            self._products[product_id] = updated
        logger.info('Restocked %s by %s (qty=%s)', product_id, amount, updated.quantity)
        return updated

    def remove_product(self, product_id: str) -> None:
        with self._lock:
            if product_id not in self._products:
                raise NotFoundError('product', product_id)
            del self._products[product_id]
        logger.info('Removed product %s', product_id)

    def _alert_if_short(self, before: Optional[PharmacyProduct], after: PharmacyProduct) -> None:
        if after.status == STOCK_IN or (before is not None and before.status == after.status):
            return
        if after.status == STOCK_OUT:
            message = f'{after.name} is out of stock'
        else:
            message = f'{after.name} is running low ({after.quantity} left, minimum {after.min_stock})'
        self._events.publish('pharmacy', 'Stock alert', message, related_id=after.id)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> PharmacyOrder:
        with self._lock:
            order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError('order', order_id)
        return order

    def list_orders(self, *, status: Optional[str] = None) -> list[PharmacyOrder]:
        if status and status not in ORDER_STATUS_CHOICES:
            raise ValidationError(f'unknown order status {status!r}', field='status')
        with self._lock:
            orders = list(self._orders.values())
        if status:
            orders = [o for o in orders if o.status == status]
        return orders

    def pending_orders(self) -> list[PharmacyOrder]:
        return [o for o in self.list_orders() if o.is_open]

    def place_order(
        self,
        product_id: str,
        quantity: int,
        supplier: Optional[str] = None,
        notes: Optional[str] = None,
        expected_delivery: Optional[date] = None,
    ) -> PharmacyOrder:
        amount = _non_negative_int(quantity, 'quantity')
        if amount == 0:
            raise ValidationError('quantity must be positive', field='quantity')
        with self._lock:
            product = self.get_product(product_id)
            order = PharmacyOrder(
                id=f'order-{uuid.uuid4().hex[:12]}',
                product_id=product.id,
                product_name=product.name,
                quantity=amount,
                supplier=(supplier or '').strip() or product.supplier,
                order_date=self._today(),
                status=ORDER_PENDING,
                total_cost=product.price * amount,
                expected_delivery=expected_delivery,
                notes=(notes or '').strip(),
            )
            self._orders[order.id] = order
        logger.info('Placed %s: %s x %s (%s)', order.id, amount, product.name, order.total_cost)
        return order

    def advance_order_status(self, order_id: str, new_status: str) -> PharmacyOrder:
        if new_status not in ORDER_STATUS_CHOICES:
            raise ValidationError(f'unknown order status {new_status!r}', field='status')
        with self._lock:
            order = self.get_order(order_id)
            if not can_advance(order.status, new_status):
                logger.warning('Rejected %s: %s -> %s', order_id, order.status, new_status)
                raise InvalidTransitionError('order', order_id, order.status, new_status)
            restocked = None
            if new_status == ORDER_DELIVERED:
                # resolve everything before writing so a missing product leaves the order untouched
                product = self.get_product(order.product_id)
                restocked = replace(
                    product, quantity=product.quantity + order.quantity, last_restocked=self._today(),
                )
            updated = replace(order, status=new_status)
            self._orders[order_id] = updated
            if restocked is not None:
                self._products[restocked.id] = restocked
        logger.info('%s: %s -> %s', order_id, order.status, new_status)
        if restocked is not None:
            logger.info('Reconciled %s into %s (qty=%s, status=%s)',
                        order_id, restocked.id, restocked.quantity, restocked.status)
        return updated

    def cancel_order(self, order_id: str) -> PharmacyOrder:
        return self.advance_order_status(order_id, ORDER_CANCELLED)

    # ------------------------------------------------------------------

    def summary(self) -> dict[str, int]:
        products = self.list_products()
        return {
            'inStock': sum(1 for p in products if p.status == STOCK_IN),
            'lowStock': sum(1 for p in products if p.status == STOCK_LOW),
            'outOfStock': sum(1 for p in products if p.status == STOCK_OUT),
            'openOrders': len(self.pending_orders()),
        }

    def load(self, products=(), orders=()) -> None:
        """Bulk-load pre-built products and orders (demo fixtures)."""
        with self._lock:
            for p in products:
                self._products[p.id] = p
            for o in orders:
                self._orders[o.id] = o

    def reset(self) -> None:
        with self._lock:
            self._products.clear()
            self._orders.clear()
