"""
Process-wide front-office managers.

Each manager is built once per process on first use and wired to the
shared notification feed.  Views and commands obtain them through the
accessors below; tests call :func:`reset_managers` to start clean.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from django.conf import settings
from django.utils import timezone

from .notifications import DEFAULT_MAX_ITEMS, NotificationFeed
from .pharmacy import PharmacyInventoryManager
from .reception import ReceptionQueueManager

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_feed: Optional[NotificationFeed] = None
_reception: Optional[ReceptionQueueManager] = None
_pharmacy: Optional[PharmacyInventoryManager] = None


def _build() -> None:
    global _feed, _reception, _pharmacy
    from . import directory

    feed = NotificationFeed(max_items=getattr(settings, 'CLINIC_NOTIFICATION_LIMIT', DEFAULT_MAX_ITEMS))
    _reception = ReceptionQueueManager(events=feed, patient_directory=directory.patient_name)
    _pharmacy = PharmacyInventoryManager(events=feed)
    if getattr(settings, 'CLINIC_SEED_DEMO_DATA', False):
        seed_demo_data()
    # published last: _ensure() treats a set feed as "fully built"
    _feed = feed


def _ensure() -> None:
    if _feed is None:
        with _lock:
            if _feed is None:
                _build()


def get_notification_feed() -> NotificationFeed:
    _ensure()
    return _feed


def get_reception_manager() -> ReceptionQueueManager:
    _ensure()
    return _reception


def get_pharmacy_manager() -> PharmacyInventoryManager:
    _ensure()
    return _pharmacy


def seed_demo_data() -> None:
    from . import demo_data

    today = timezone.localdate()
    _reception.load(demo_data.reception_entries(today))
    _pharmacy.load(demo_data.pharmacy_products(today), demo_data.pharmacy_orders(today))
    logger.info('Seeded front-office managers with demo data')


def reset_managers() -> None:
    """Drop all in-memory state; the next accessor call rebuilds the managers."""
    global _feed, _reception, _pharmacy
    with _lock:
        _feed = _reception = _pharmacy = None
