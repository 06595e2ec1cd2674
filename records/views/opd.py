"""
OPD appointment list and deletion.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsAdminRole
from ..serializers.opd import AppointmentListQuerySerializer
from ..services.appointments import delete_appointment, list_appointments, serialize_appointment
from ..services.audit import try_log_action


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def appointments(request):
    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs = list_appointments(vd['tab'], vd['search'])
    total = qs.count()
    page = vd.get('page') or 1
    page_size = vd.get('pageSize') or 0
    if page_size:
        start = (page - 1) * page_size
        qs = qs[start:start + page_size]
    return Response({
        'ok': True,
        'data': [serialize_appointment(a) for a in qs],
        'pagination': {'total': total, 'page': page, 'pageSize': page_size or total},
    })


@api_view(['DELETE', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def appointment_delete(request, opd_id: int):
    delete_appointment(opd_id)
    try_log_action(user=request.user, action='opd_delete', object_type='opd_registration', object_id=opd_id)
    return Response({'ok': True})
