"""
Reception intake queue.

The manager owns the entries registered at the front desk, orders them
for display (waiting patients first, most urgent first) and enforces the
intake state machine::

    waiting -> in_consultation -> completed
    waiting -> cancelled
    in_consultation -> cancelled

Completed and cancelled entries are frozen.  Every status change is
appended to the entry's transition history.
"""
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from typing import Callable, Optional

from django.utils import timezone

from clinic.entities import (
    ENTRY_CANCELLED,
    ENTRY_COMPLETED,
    ENTRY_IN_CONSULTATION,
    ENTRY_STATUS_CHOICES,
    ENTRY_WAITING,
    PRIORITY_LOW,
    PRIORITY_RANK,
    PRIORITY_URGENT,
    ReceptionEntry,
    Transition,
)
from clinic.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from clinic.services.notifications import EventSink, NullSink

logger = logging.getLogger(__name__)

TRANSITIONS = {
    ENTRY_WAITING: [ENTRY_IN_CONSULTATION, ENTRY_CANCELLED],
    ENTRY_IN_CONSULTATION: [ENTRY_COMPLETED, ENTRY_CANCELLED],
    ENTRY_COMPLETED: [],
    ENTRY_CANCELLED: [],
}


def can_transition(current: str, new: str) -> bool:
    """Return True if an entry may move from ``current`` to ``new``."""
    return new in TRANSITIONS.get(current, [])


def _clean(value: Optional[str]) -> str:
    return (value or '').strip()


class ReceptionQueueManager:
    """Front-desk intake queue held in process memory.

    ``patient_directory`` resolves a registered patient id to a display
    name (or ``None`` when unknown); ``clock`` returns an aware datetime and
    is injectable so tests can pin arrival times.
    """

    def __init__(
        self,
        *,
        events: Optional[EventSink] = None,
        patient_directory: Optional[Callable[[str], Optional[str]]] = None,
        clock: Callable = timezone.now,
    ):
        self._events = events or NullSink()
        self._patient_directory = patient_directory
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, ReceptionEntry] = {}
        self._sequence = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, entry_id: str) -> ReceptionEntry:
        with self._lock:
            entry = self._entries.get(entry_id)
        if entry is None:
            raise NotFoundError('reception entry', entry_id)
        return entry

    def list_ordered(self) -> list[ReceptionEntry]:
        """Waiting entries by triage rank then arrival, then everyone else by arrival."""
        with self._lock:
            entries = sorted(self._entries.values(), key=lambda e: e.sequence)
        waiting = [e for e in entries if e.status == ENTRY_WAITING]
        others = [e for e in entries if e.status != ENTRY_WAITING]
        # sorted() is stable, so equal ranks keep arrival order
        waiting.sort(key=lambda e: PRIORITY_RANK[e.priority])
        return waiting + others

    def waiting(self) -> list[ReceptionEntry]:
        return [e for e in self.list_ordered() if e.status == ENTRY_WAITING]

    def search(self, query: str) -> list[ReceptionEntry]:
        needle = _clean(query).lower()
        if not needle:
            return self.list_ordered()
        return [
            e for e in self.list_ordered()
            if needle in e.patient_name.lower() or needle in e.reason.lower()
        ]

    def today_stats(self) -> dict[str, int]:
        today = timezone.localtime(self._clock()).date()
        with self._lock:
            todays = [e for e in self._entries.values() if e.created_at == today]
        counts = {
            'waiting': 0,
            'inConsultation': 0,
            'completed': 0,
            'cancelled': 0,
        }
        keys = {
            ENTRY_WAITING: 'waiting',
            ENTRY_IN_CONSULTATION: 'inConsultation',
            ENTRY_COMPLETED: 'completed',
            ENTRY_CANCELLED: 'cancelled',
        }
        for e in todays:
            counts[keys[e.status]] += 1
        counts['urgentWaiting'] = sum(
            1 for e in todays if e.status == ENTRY_WAITING and e.priority == PRIORITY_URGENT
        )
        return counts

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def register_arrival(
        self,
        patient_ref: str,
        reason: str,
        priority: str = PRIORITY_LOW,
        notes: str = '',
        *,
        patient_name: str = '',
        registered: bool = False,
    ) -> ReceptionEntry:
        """Put a patient in the waiting queue.

        ``patient_ref`` is either a registered patient id, resolved through
        the patient directory, or the free-form name of a walk-in.  When the
        id cannot be resolved the explicit ``patient_name`` is used, so a
        front-desk typo does not lose the arrival.  With ``registered`` the
        ref is always an id: an unknown id without a fallback name raises
        :class:`NotFoundError` instead of being taken as a walk-in name.
        """
        ref = _clean(patient_ref)
        patient_id = ''
        name = _clean(patient_name)
        resolved = self._patient_directory(ref) if (ref and self._patient_directory) else None
        if resolved:
            patient_id, name = ref, _clean(resolved)
        elif ref and name:
            # unresolved id with an explicit name: keep the reference
            patient_id = ref
        elif ref and registered:
            raise NotFoundError('patient', ref)
        elif ref:
            name = ref
        reason = _clean(reason)
        if not name:
            raise ValidationError('patient name must not be empty', field='patientName')
        if not reason:
            raise ValidationError('reason must not be empty', field='reason')
        if priority not in PRIORITY_RANK:
            raise ValidationError(f'unknown priority {priority!r}', field='priority')

        now = timezone.localtime(self._clock())
        with self._lock:
            self._sequence += 1
            entry = ReceptionEntry(
                id=f'rec-{uuid.uuid4().hex[:12]}',
                patient_id=patient_id,
                patient_name=name,
                arrival_time=now.strftime('%H:%M'),
                reason=reason,
                priority=priority,
                status=ENTRY_WAITING,
                created_at=now.date(),
                sequence=self._sequence,
                notes=_clean(notes),
                history=(Transition(None, ENTRY_WAITING, now, 'arrival'),),
            )
            self._entries[entry.id] = entry
        logger.info('Registered %s (%s, priority=%s)', entry.id, entry.patient_name, priority)
        self._events.publish(
            'patient_arrival',
            'Patient arrival',
            f'{entry.patient_name} has arrived at the front desk ({reason})',
            related_id=entry.id,
        )
        return entry

    def _transition(self, entry_id: str, new_status: str, reason: str, **changes) -> ReceptionEntry:
        with self._lock:
            entry = self.get(entry_id)
            if not can_transition(entry.status, new_status):
                logger.warning('Rejected %s: %s -> %s', entry_id, entry.status, new_status)
                raise InvalidTransitionError('reception entry', entry_id, entry.status, new_status)
            step = Transition(entry.status, new_status, timezone.localtime(self._clock()), reason)
            updated = replace(entry, status=new_status, history=entry.history + (step,), **changes)
            self._entries[entry_id] = updated
        logger.info('%s: %s -> %s', entry_id, entry.status, new_status)
        return updated

    def assign_doctor(self, entry_id: str, doctor_name: str, doctor_id: Optional[str] = None) -> ReceptionEntry:
        doctor_name = _clean(doctor_name)
        if not doctor_name:
            raise ValidationError('doctor name must not be empty', field='doctorName')
        return self._transition(
            entry_id, ENTRY_IN_CONSULTATION, f'assigned to {doctor_name}',
            assigned_doctor=doctor_name,
            assigned_doctor_id=str(doctor_id) if doctor_id is not None else None,
        )

    def complete(self, entry_id: str) -> ReceptionEntry:
        return self._transition(entry_id, ENTRY_COMPLETED, 'consultation finished')

    def cancel(self, entry_id: str, reason: str = '') -> ReceptionEntry:
        return self._transition(entry_id, ENTRY_CANCELLED, _clean(reason) or 'cancelled')

    def update_status(
        self,
        entry_id: str,
        status: str,
        *,
        doctor_name: str = '',
        doctor_id: Optional[str] = None,
        reason: str = '',
    ) -> ReceptionEntry:
        """Move an entry to ``status`` through the matching operation.

        Entering consultation needs a doctor; nothing ever moves back to
        ``waiting``.
        """
        if status not in ENTRY_STATUS_CHOICES:
            raise ValidationError(f'unknown status {status!r}', field='status')
        if status == ENTRY_IN_CONSULTATION:
            return self.assign_doctor(entry_id, doctor_name, doctor_id)
        if status == ENTRY_COMPLETED:
            return self.complete(entry_id)
        if status == ENTRY_CANCELLED:
            return self.cancel(entry_id, reason)
        entry = self.get(entry_id)
        raise InvalidTransitionError('reception entry', entry_id, entry.status, status)

    def assigned_to(self, doctor_id, doctor_name: str = '') -> list[ReceptionEntry]:
        """Entries currently in consultation with a doctor.

        Matches on the account id, or on the display name for entries
        assigned by free-text name.
        """
        doctor_id = str(doctor_id)
        return [
            e for e in self.list_ordered()
            if e.status == ENTRY_IN_CONSULTATION and (
                e.assigned_doctor_id == doctor_id
                or (e.assigned_doctor_id is None and doctor_name and e.assigned_doctor == doctor_name)
            )
        ]

    def set_priority(self, entry_id: str, priority: str) -> ReceptionEntry:
        """Re-triage a patient who is still waiting."""
        if priority not in PRIORITY_RANK:
            raise ValidationError(f'unknown priority {priority!r}', field='priority')
        with self._lock:
            entry = self.get(entry_id)
            if entry.status != ENTRY_WAITING:
                raise InvalidTransitionError('reception entry', entry_id, entry.status, 'reprioritized')
            updated = replace(entry, priority=priority)
            self._entries[entry_id] = updated
        logger.info('%s: priority %s -> %s', entry_id, entry.priority, priority)
        return updated

    def update_details(self, entry_id: str, *, reason: Optional[str] = None, notes: Optional[str] = None) -> ReceptionEntry:
        changes = {}
        if reason is not None:
            if not _clean(reason):
                raise ValidationError('reason must not be empty', field='reason')
            changes['reason'] = _clean(reason)
        if notes is not None:
            changes['notes'] = _clean(notes)
        with self._lock:
            entry = self.get(entry_id)
            if entry.is_terminal:
                raise InvalidTransitionError('reception entry', entry_id, entry.status, 'edited')
            updated = replace(entry, **changes)
            self._entries[entry_id] = updated
        return updated

    def load(self, entries) -> None:
        """Bulk-load pre-built entries (demo fixtures), keeping their order."""
        with self._lock:
            for entry in entries:
                self._sequence += 1
                self._entries[entry.id] = replace(entry, sequence=self._sequence)

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()
            self._sequence = 0
