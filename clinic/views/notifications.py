"""
Notification feed endpoints.

The feed carries patient names and visit reasons, so every endpoint here
(and the websocket in :mod:`clinic.realtime.consumers`) is limited to
staff roles.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsStaffRole
from ..serializers.notifications import NotificationListQuerySerializer
from ..services import get_notification_feed
from ..services.paging import paginate


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def notification_list(request):
    q = NotificationListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    items = get_notification_feed().list(unread_only=q.validated_data['unread'])
    page, meta = paginate(items, page=q.validated_data.get('page'), limit=q.validated_data.get('limit'))
    return Response({'ok': True, 'data': [n.to_dict() for n in page], **meta})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def notification_unread(request):
    items = get_notification_feed().list(unread_only=True)
    return Response({'ok': True, 'data': [n.to_dict() for n in items], 'total': len(items)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def notification_unread_count(request):
    return Response({'ok': True, 'count': get_notification_feed().unread_count()})


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def notification_mark_read(request, notification_id: str):
    note = get_notification_feed().mark_read(notification_id)
    return Response({'ok': True, 'data': note.to_dict()})


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def notification_mark_all_read(request):
    return Response({'ok': True, 'updated': get_notification_feed().mark_all_read()})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def notification_delete(request, notification_id: str):
    get_notification_feed().clear(notification_id)
    return Response({'ok': True})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def notification_delete_all(request):
    return Response({'ok': True, 'deleted': get_notification_feed().clear_all()})
