"""
Django admin registration for user accounts.

Staff and patient accounts are the only database-backed records; the
admin is where roles are granted and API tokens issued during
development.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User


@admin.register(User)
class ClinicUserAdmin(UserAdmin):
    list_display = ('username', 'first_name', 'last_name', 'role', 'department', 'is_active')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'first_name', 'last_name', 'phone')
    fieldsets = UserAdmin.fieldsets + (
        ('Clinic', {'fields': ('role', 'department', 'phone')}),
    )
