"""
Notification feed fed by the front-office managers.

Managers never know who listens: they are handed an event sink (anything
with a ``publish`` method) and report what happened.  The feed keeps the
notifications newest first and relays each one to the ``notifications``
channel group so connected dashboards update without polling.
"""
from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from dataclasses import replace
from typing import Callable, Optional, Protocol

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

from clinic.entities import NOTIFICATION_TYPES, Notification
from clinic.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

CHANNEL_GROUP = 'notifications'
DEFAULT_MAX_ITEMS = 200


class EventSink(Protocol):
    def publish(self, type: str, title: str, message: str, related_id: Optional[str] = None) -> Optional[Notification]:
        ...


class NullSink:
    """Sink that drops every event; used when a manager runs standalone."""

    def publish(self, type, title, message, related_id=None):
        return None


class NotificationFeed:
    """Newest-first feed holding at most ``max_items`` notifications; the oldest drop off."""

    def __init__(self, *, clock: Callable = timezone.now, broadcast: bool = True, max_items: int = DEFAULT_MAX_ITEMS):
        if max_items < 1:
            raise ValueError('max_items must be positive')
        self._clock = clock
        self._broadcast = broadcast
        self._lock = threading.RLock()
        self._items: deque[Notification] = deque(maxlen=max_items)

    def publish(self, type: str, title: str, message: str, related_id: Optional[str] = None) -> Notification:
        if type not in NOTIFICATION_TYPES:
            raise ValidationError(f'unknown notification type {type!r}', field='type')
        if not (title or '').strip():
            raise ValidationError('title must not be empty', field='title')
        note = Notification(
            id=f'notif-{uuid.uuid4().hex[:12]}',
            type=type,
            title=title.strip(),
            message=(message or '').strip(),
            created_at=self._clock(),
            related_id=related_id,
        )
        with self._lock:
            self._items.appendleft(note)
        logger.debug('Notification %s published (%s)', note.id, note.type)
        if self._broadcast:
            self._send(note)
        return note

    def _send(self, note: Notification) -> None:
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return
        payload = {'type': 'notification.created', **note.to_dict()}
        async_to_sync(channel_layer.group_send)(CHANNEL_GROUP, payload)

    def list(self, *, unread_only: bool = False) -> list[Notification]:
        with self._lock:
            items = list(self._items)
        if unread_only:
            items = [n for n in items if not n.read]
        return items

    def unread_count(self) -> int:
        with self._lock:
            return sum(1 for n in self._items if not n.read)

    def _index(self, notification_id: str) -> int:
        for i, n in enumerate(self._items):
            if n.id == notification_id:
                return i
        raise NotFoundError('notification', notification_id)

    def mark_read(self, notification_id: str) -> Notification:
        with self._lock:
            i = self._index(notification_id)
            self._items[i] = replace(self._items[i], read=True)
            return self._items[i]

    def mark_all_read(self) -> int:
        with self._lock:
            changed = 0
            for i, n in enumerate(self._items):
                if not n.read:
                    self._items[i] = replace(n, read=True)
                    changed += 1
            return changed

    def clear(self, notification_id: str) -> None:
        with self._lock:
            del self._items[self._index(notification_id)]

    def clear_all(self) -> int:
        with self._lock:
            count = len(self._items)
            self._items.clear()
            return count

    def reset(self) -> None:
        self.clear_all()
