"""
IPD admission lists.

``/api/ipd/active`` lists admissions still in hospital (the active and
partially discharged tabs).  Discharged admissions are only reachable
by search, which needs a phone number, the last five UHID digits, or a
name.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..serializers.ipd import ActiveListQuerySerializer, DischargedSearchSerializer
from ..services import billing


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def active_admissions(request):
    q = ActiveListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    records = billing.active_records(**q.validated_data)
    return Response({
        'ok': True,
        'data': [r.to_dict() for r in records],
        'wards': billing.ward_names(),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def discharged_admissions(request):
    q = DischargedSearchSerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    records = billing.discharged_records(**q.validated_data)
    return Response({'ok': True, 'data': [r.to_dict() for r in records]})
