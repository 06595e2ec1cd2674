"""
Billing dashboard endpoint.

Summarises OPD takings and IPD deposits over a date range of at most
30 days.  Longer ranges are cut to 30 days from the start date and the
response says so through ``clamped``.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsAdminRole
from ..serializers.ipd import DateRangeSerializer
from ..services.billing import billing_summary


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def billing_dashboard(request):
    q = DateRangeSerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    data = billing_summary(q.validated_data['startDate'], q.validated_data['endDate'])
    return Response({'ok': True, 'data': data})
