"""
In-memory records handled by the front-office managers.

Every record is a frozen dataclass: managers replace a record wholesale
when it changes, so whatever a caller holds is a snapshot that can never
drift out of sync with (or tamper with) the manager's own state.  The
``to_dict`` helpers produce the camelCase payloads the front end expects.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

# ---------------------------------------------------------------------------
# Reception
# ---------------------------------------------------------------------------

PRIORITY_URGENT = 'urgent'
PRIORITY_HIGH = 'high'
PRIORITY_MEDIUM = 'medium'
PRIORITY_LOW = 'low'

# Lower rank is served first.
PRIORITY_RANK = {
    PRIORITY_URGENT: 0,
    PRIORITY_HIGH: 1,
    PRIORITY_MEDIUM: 2,
    PRIORITY_LOW: 3,
}
PRIORITY_CHOICES = list(PRIORITY_RANK)

ENTRY_WAITING = 'waiting'
ENTRY_IN_CONSULTATION = 'in_consultation'
ENTRY_COMPLETED = 'completed'
ENTRY_CANCELLED = 'cancelled'
ENTRY_STATUS_CHOICES = [ENTRY_WAITING, ENTRY_IN_CONSULTATION, ENTRY_COMPLETED, ENTRY_CANCELLED]


@dataclass(frozen=True)
class Transition:
    """One status change of a reception entry."""
    from_status: Optional[str]
    to_status: str
    at: datetime
    reason: str = ''

    def to_dict(self) -> dict[str, Any]:
        return {
            'from': self.from_status,
            'to': self.to_status,
            'timestamp': self.at.strftime('%Y-%m-%d %H:%M'),
            'reason': self.reason,
        }


@dataclass(frozen=True)
class ReceptionEntry:
    id: str
    patient_id: str
    patient_name: str
    arrival_time: str
    reason: str
    priority: str
    status: str
    created_at: date
    sequence: int
    assigned_doctor: Optional[str] = None
    # account id when assigned through the directory; None for free-text names
    assigned_doctor_id: Optional[str] = None
    notes: str = ''
    history: tuple[Transition, ...] = ()

    @property
    def is_walk_in(self) -> bool:
        return not self.patient_id

    @property
    def is_terminal(self) -> bool:
        return self.status in (ENTRY_COMPLETED, ENTRY_CANCELLED)

    def to_dict(self, *, with_history: bool = False) -> dict[str, Any]:
        data = {
            'id': self.id,
            'patientId': self.patient_id,
            'patientName': self.patient_name,
            'arrivalTime': self.arrival_time,
            'reason': self.reason,
            'priority': self.priority,
            'status': self.status,
            'assignedDoctor': self.assigned_doctor,
            'assignedDoctorId': self.assigned_doctor_id,
            'notes': self.notes,
            'createdAt': self.created_at.isoformat(),
        }
        if with_history:
            data['transitionHistory'] = [t.to_dict() for t in self.history]
        return data


# ---------------------------------------------------------------------------
# Pharmacy
# ---------------------------------------------------------------------------

STOCK_IN = 'in_stock'
STOCK_LOW = 'low_stock'
STOCK_OUT = 'out_of_stock'
STOCK_STATUS_CHOICES = [STOCK_IN, STOCK_LOW, STOCK_OUT]

ORDER_PENDING = 'pending'
ORDER_CONFIRMED = 'confirmed'
ORDER_DELIVERED = 'delivered'
ORDER_CANCELLED = 'cancelled'
ORDER_STATUS_CHOICES = [ORDER_PENDING, ORDER_CONFIRMED, ORDER_DELIVERED, ORDER_CANCELLED]


def stock_status(quantity: int, min_stock: int) -> str:
    """Derive the stock badge from the on-hand quantity and reorder threshold."""
    if quantity == 0:
        return STOCK_OUT
    if quantity < min_stock:
        return STOCK_LOW
    return STOCK_IN


@dataclass(frozen=True)
class PharmacyProduct:
    id: str
    name: str
    category: str
    quantity: int
    min_stock: int
    unit: str
    price: Decimal
    supplier: str
    expiry_date: Optional[date] = None
    last_restocked: Optional[date] = None

    # Not a field: there is nothing to assign, it always follows quantity.
    @property
    def status(self) -> str:
        return stock_status(self.quantity, self.min_stock)

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'quantity': self.quantity,
            'minStock': self.min_stock,
            'unit': self.unit,
            'price': self.price,
            'supplier': self.supplier,
            'expiryDate': self.expiry_date.isoformat() if self.expiry_date else None,
            'status': self.status,
            'lastRestocked': self.last_restocked.isoformat() if self.last_restocked else None,
        }


@dataclass(frozen=True)
class PharmacyOrder:
    id: str
    product_id: str
    product_name: str
    quantity: int
    supplier: str
    order_date: date
    status: str
    total_cost: Decimal
    expected_delivery: Optional[date] = None
    notes: str = ''

    @property
    def is_open(self) -> bool:
        return self.status in (ORDER_PENDING, ORDER_CONFIRMED)

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'productId': self.product_id,
            'productName': self.product_name,
            'quantity': self.quantity,
            'supplier': self.supplier,
            'orderDate': self.order_date.isoformat(),
            'expectedDelivery': self.expected_delivery.isoformat() if self.expected_delivery else None,
            'status': self.status,
            'totalCost': self.total_cost,
            'notes': self.notes,
        }


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

NOTIFICATION_TYPES = ['appointment', 'patient_arrival', 'exam_result', 'pharmacy', 'general', 'billing']


@dataclass(frozen=True)
class Notification:
    id: str
    type: str
    title: str
    message: str
    created_at: datetime
    read: bool = False
    related_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type,
            'title': self.title,
            'message': self.message,
            'read': self.read,
            'relatedId': self.related_id,
            'createdAt': self.created_at.isoformat(),
        }
