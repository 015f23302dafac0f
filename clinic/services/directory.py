from typing import Optional

from django.contrib.auth import get_user_model

User = get_user_model()


def _by_id(raw_id, role: str):
    try:
        pk = int(str(raw_id).strip())
    except (TypeError, ValueError):
        return None
    return User.objects.filter(id=pk, role=role, is_active=True).first()


def patient_name(patient_id: str) -> Optional[str]:
    """Resolve a registered patient id to a display name."""
    user = _by_id(patient_id, 'patient')
    return user.display_name if user else None


def doctor_name(doctor_id) -> Optional[str]:
    user = _by_id(doctor_id, 'doctor')
    return f"Dr. {user.display_name}" if user else None


def list_doctors(*, q: Optional[str] = None) -> list[dict]:
    qs = User.objects.filter(role='doctor', is_active=True).only('id', 'first_name', 'last_name', 'username', 'department')
    if q:
        qs = qs.filter(first_name__icontains=q) | qs.filter(last_name__icontains=q) | qs.filter(username__icontains=q)
    return [{
        'id': u.id,
        'name': f"Dr. {u.display_name}",
        'department': u.department,
    } for u in qs.order_by('id')]
