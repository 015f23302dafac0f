"""
Demo fixtures loaded into the managers when ``CLINIC_SEED_DEMO_DATA`` is on.

These are the records the front-end mock screens were built against, so a
freshly started development server shows a realistic front desk and
pharmacy.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal

from django.utils import timezone

from clinic.entities import (
    ENTRY_COMPLETED,
    ENTRY_IN_CONSULTATION,
    ENTRY_WAITING,
    ORDER_CONFIRMED,
    ORDER_PENDING,
    PharmacyOrder,
    PharmacyProduct,
    ReceptionEntry,
    Transition,
)


def _at(day: date, hh_mm: str) -> datetime:
    hours, minutes = (int(x) for x in hh_mm.split(':'))
    return timezone.make_aware(datetime.combine(day, time(hours, minutes)))


def reception_entries(today: date) -> list[ReceptionEntry]:
    rows = [
        ('rec-1', '', 'Sophie Lambert', '08:30', 'Routine check-up', 'low', ENTRY_WAITING, None, ''),
        ('rec-2', '', 'Jean Martin', '08:45', 'Cardiac follow-up', 'medium', ENTRY_IN_CONSULTATION,
         'Dr. Sophie Bernard', ''),
        ('rec-3', '', 'New patient', '09:00', 'Chest pain', 'urgent', ENTRY_WAITING, None,
         'Unregistered patient, to be created in the system'),
        ('rec-4', '', 'Marie Dupont', '09:15', 'Results pick-up', 'low', ENTRY_COMPLETED, 'Dr. Pierre Moreau', ''),
    ]
    entries = []
    for entry_id, patient_id, name, arrival, reason, priority, status, doctor, notes in rows:
        arrived = _at(today, arrival)
        history = [Transition(None, ENTRY_WAITING, arrived, 'arrival')]
        if status != ENTRY_WAITING:
            history.append(Transition(ENTRY_WAITING, ENTRY_IN_CONSULTATION, arrived + timedelta(minutes=10),
                                      f'assigned to {doctor}'))
        if status == ENTRY_COMPLETED:
            history.append(Transition(ENTRY_IN_CONSULTATION, ENTRY_COMPLETED, arrived + timedelta(minutes=30),
                                      'consultation finished'))
        entries.append(ReceptionEntry(
            id=entry_id,
            patient_id=patient_id,
            patient_name=name,
            arrival_time=arrival,
            reason=reason,
            priority=priority,
            status=status,
            created_at=today,
            sequence=0,
            assigned_doctor=doctor,
            notes=notes,
            history=tuple(history),
        ))
    return entries


def pharmacy_products(today: date) -> list[PharmacyProduct]:
    return [
        PharmacyProduct('prod-1', 'Paracetamol 500mg', 'Analgesics', 500, 100, 'tablets', Decimal('0.15'),
                        'PharmaDist', date(today.year + 2, 6, 30), today - timedelta(days=12)),
        PharmacyProduct('prod-2', 'Amoxicillin 1g', 'Antibiotics', 15, 50, 'capsules', Decimal('0.80'),
                        'MediSupply', date(today.year + 1, 3, 31), today - timedelta(days=40)),
        PharmacyProduct('prod-3', 'Insulin glargine', 'Endocrinology', 0, 10, 'pens', Decimal('24.50'),
                        'BioPharm', date(today.year + 1, 1, 31), today - timedelta(days=75)),
        PharmacyProduct('prod-4', 'Sterile gauze 10x10', 'Consumables', 320, 200, 'packs', Decimal('1.20'),
                        'MediSupply', None, today - timedelta(days=5)),
    ]


def pharmacy_orders(today: date) -> list[PharmacyOrder]:
    return [
        PharmacyOrder('order-1', 'prod-2', 'Amoxicillin 1g', 200, 'MediSupply', today - timedelta(days=2),
                      ORDER_CONFIRMED, Decimal('160.00'), today + timedelta(days=3)),
        PharmacyOrder('order-2', 'prod-3', 'Insulin glargine', 20, 'BioPharm', today - timedelta(days=1),
                      ORDER_PENDING, Decimal('490.00'), today + timedelta(days=7), 'Urgent: ward stock empty'),
    ]
