"""
Staff dashboard endpoint.

Provides the front-office overview shown on the admin, doctor and
reception dashboards: today's intake counts, the next patients to call,
stock badges and the unread notification count.
"""
from __future__ import annotations

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsStaffRole
from ..services import get_notification_feed, get_pharmacy_manager, get_reception_manager

NEXT_UP_LIMIT = 5


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def staff_dashboard(request):
    """Return the overview for staff roles.

    Doctors additionally get the patients currently in consultation with
    them: by account id, or by display name for free-text assignments.
    """
    reception = get_reception_manager()
    pharmacy = get_pharmacy_manager()
    payload = {
        'ok': True,
        'generatedAt': timezone.now().strftime('%Y-%m-%d %H:%M:%S'),
        'reception': reception.today_stats(),
        'nextUp': [e.to_dict() for e in reception.waiting()[:NEXT_UP_LIMIT]],
        'pharmacy': pharmacy.summary(),
        'stockAlerts': [p.to_dict() for p in pharmacy.low_stock()],
        'unreadNotifications': get_notification_feed().unread_count(),
    }
    user = request.user
    if getattr(user, 'role', None) == 'doctor':
        mine = reception.assigned_to(user.id, f"Dr. {user.display_name}")
        payload['myPatients'] = [e.to_dict() for e in mine]
    return Response(payload)
