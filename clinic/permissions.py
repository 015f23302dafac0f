"""
Custom permission classes for role based access control.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

STAFF_ROLES = {"admin", "doctor", "receptionist"}
FRONT_DESK_ROLES = {"admin", "receptionist"}


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsStaffRole(BasePermission):
    """Any clinic staff member (admin, doctor or receptionist)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in STAFF_ROLES


class IsFrontDeskRole(BasePermission):
    """Receptionists and administrators, who run the intake queue."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in FRONT_DESK_ROLES


class IsAdminRole(BasePermission):
    """Allow access only to administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == "admin"


class IsAdminOrStaffReadOnly(BasePermission):
    """Staff may read; only administrators may write (pharmacy catalog)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        role = _role(request)
        if request.method in SAFE_METHODS:
            return role in STAFF_ROLES
        return role == "admin"
