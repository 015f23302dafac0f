"""
Database models for the front-office backend.

Only staff and patient accounts live in the database; they back token
authentication and role checks.  Reception entries, pharmacy stock and
notifications are held by the in-memory managers in
:mod:`clinic.services`.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user model with a dashboard role.

    Roles mirror the front-end dashboards: 'admin', 'doctor',
    'receptionist' and 'patient'.
    """
    ROLE_CHOICES = [
        ('admin', 'Administrator'),
        ('doctor', 'Doctor'),
        ('receptionist', 'Receptionist'),
        ('patient', 'Patient'),
    ]
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default='patient', db_index=True)
    department = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True)

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"
