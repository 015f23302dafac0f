"""
Reception desk endpoints.

Receptionists register arrivals, triage them and hand them over to a
doctor; doctors mark consultations as finished.  The list endpoint returns
the queue in display order: waiting patients first, most urgent first,
then everyone already seen, in arrival order.

Domain errors raised by the queue manager (unknown entry, forbidden
transition, empty input) are turned into JSON by
``clinic.exceptions.api_exception_handler``.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..entities import ENTRY_COMPLETED, ENTRY_IN_CONSULTATION
from ..exceptions import NotFoundError
from ..permissions import IsFrontDeskRole, IsStaffRole
from ..serializers.reception import (
    AssignDoctorSerializer,
    CancelSerializer,
    PrioritySerializer,
    ReceptionCreateSerializer,
    ReceptionListQuerySerializer,
    ReceptionStatusSerializer,
    ReceptionUpdateSerializer,
)
from ..services import directory, get_reception_manager
from ..services.paging import paginate


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def reception_collection(request):
    """GET: the ordered queue (``?q=`` filters by name or reason, ``?page=&limit=`` paginate).
    POST: register an arrival."""
    manager = get_reception_manager()
    if request.method == 'GET':
        q = ReceptionListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        query = q.validated_data.get('q')
        entries = manager.search(query) if query else manager.list_ordered()
        items, meta = paginate(entries, page=q.validated_data.get('page'), limit=q.validated_data.get('limit'))
        return Response({'ok': True, 'data': [e.to_dict() for e in items], **meta})

    if not IsFrontDeskRole().has_permission(request, None):
        return Response({'detail': 'only the front desk can register arrivals'}, status=status.HTTP_403_FORBIDDEN)
    s = ReceptionCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data
    patient_id = (data.get('patientId') or '').strip()
    if patient_id:
        # registered patient; the typed name is only a fallback
        entry = manager.register_arrival(
            patient_id, data['reason'], data['priority'], data.get('notes', ''),
            patient_name=data.get('patientName', ''),
            registered=True,
        )
    else:
        entry = manager.register_arrival(
            data['patientName'], data['reason'], data['priority'], data.get('notes', ''),
        )
    return Response({'ok': True, 'data': entry.to_dict()}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def reception_waiting(request):
    entries = get_reception_manager().waiting()
    return Response({'ok': True, 'data': [e.to_dict() for e in entries], 'total': len(entries)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def reception_today_stats(request):
    return Response({'ok': True, 'data': get_reception_manager().today_stats()})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def reception_detail(request, entry_id: str):
    """GET: one entry with its transition history.
    PUT/PATCH: edit reason, notes and (while waiting) priority.
    DELETE: cancel the entry; entries are never erased.
    """
    manager = get_reception_manager()
    if request.method == 'GET':
        return Response({'ok': True, 'data': manager.get(entry_id).to_dict(with_history=True)})

    if not IsFrontDeskRole().has_permission(request, None):
        return Response({'detail': 'only the front desk can change entries'}, status=status.HTTP_403_FORBIDDEN)
    if request.method == 'DELETE':
        entry = manager.cancel(entry_id)
        return Response({'ok': True, 'data': entry.to_dict()})

    s = ReceptionUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    priority = s.validated_data.get('priority')
    if priority and priority != manager.get(entry_id).priority:
        manager.set_priority(entry_id, priority)
    entry = manager.update_details(
        entry_id,
        reason=s.validated_data.get('reason'),
        notes=s.validated_data.get('notes'),
    )
    return Response({'ok': True, 'data': entry.to_dict()})


def _resolve_doctor(validated_data):
    """(display name, account id) from a doctorId or a free-text doctorName."""
    doctor_id = validated_data.get('doctorId')
    if doctor_id:
        doctor_name = directory.doctor_name(doctor_id)
        if not doctor_name:
            raise NotFoundError('doctor', str(doctor_id))
        return doctor_name, doctor_id
    return validated_data.get('doctorName', ''), None


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated, IsFrontDeskRole])
def reception_assign(request, entry_id: str):
    """Hand a waiting patient to a doctor, by doctor account id or by name."""
    s = AssignDoctorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor_name, doctor_id = _resolve_doctor(s.validated_data)
    entry = get_reception_manager().assign_doctor(entry_id, doctor_name, doctor_id)
    return Response({'ok': True, 'data': entry.to_dict()})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsStaffRole])
def reception_update_status(request, entry_id: str):
    """Generic status change.  Doctors may only complete; everything else is front desk."""
    s = ReceptionStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    new_status = s.validated_data['status']
    if new_status != ENTRY_COMPLETED and not IsFrontDeskRole().has_permission(request, None):
        return Response({'detail': 'only the front desk can make this change'}, status=status.HTTP_403_FORBIDDEN)
    doctor_name, doctor_id = '', None
    if new_status == ENTRY_IN_CONSULTATION:
        doctor_name, doctor_id = _resolve_doctor(s.validated_data)
    entry = get_reception_manager().update_status(
        entry_id, new_status,
        doctor_name=doctor_name,
        doctor_id=doctor_id,
        reason=s.validated_data.get('reason', ''),
    )
    return Response({'ok': True, 'data': entry.to_dict()})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsFrontDeskRole])
def reception_set_priority(request, entry_id: str):
    s = PrioritySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    entry = get_reception_manager().set_priority(entry_id, s.validated_data['priority'])
    return Response({'ok': True, 'data': entry.to_dict()})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def reception_complete(request, entry_id: str):
    entry = get_reception_manager().complete(entry_id)
    return Response({'ok': True, 'data': entry.to_dict()})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsFrontDeskRole])
def reception_cancel(request, entry_id: str):
    s = CancelSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    entry = get_reception_manager().cancel(entry_id, s.validated_data.get('reason', ''))
    return Response({'ok': True, 'data': entry.to_dict()})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFrontDeskRole])
def available_doctors(request):
    """Doctors the front desk can hand patients to."""
    return Response({'ok': True, 'data': directory.list_doctors(q=request.query_params.get('q'))})
