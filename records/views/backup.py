"""
Bulk backup of discharged admissions as one ZIP download.

Only administrators may run a backup, and they must re-enter their own
password with the request.  Progress can be followed over the
``ws/backup/<jobId>/`` WebSocket when the request carries a ``jobId``.
"""
from __future__ import annotations

import io

from django.http import FileResponse
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from ..permissions import IsAdminRole
from ..serializers.export import BackupRequestSerializer
from ..services.audit import try_log_action
from ..services.backup import run_backup


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
@throttle_classes([ScopedRateThrottle])
def ipd_backup(request):
    s = BackupRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    if not request.user.check_password(vd['password']):
        try_log_action(user=request.user, action='backup', object_type='ipd_registration',
                       detail={'result': 'bad_password'})
        raise PermissionDenied('Incorrect password.')

    result = run_backup(vd['startDate'], vd['endDate'], vd['source'], job_id=vd.get('jobId'))
    if result is None:
        return Response({'ok': True, 'count': 0, 'detail': 'No discharged patients found in this date range.'})

    try_log_action(user=request.user, action='backup', object_type='ipd_registration', detail={
        'result': 'ok',
        'start': vd['startDate'].isoformat(),
        'end': vd['endDate'].isoformat(),
        'source': vd['source'],
        'total': result.total,
        'failed': result.failed,
    })
    resp = FileResponse(io.BytesIO(result.content), content_type='application/zip',
                        as_attachment=True, filename=result.filename)
    resp['X-Backup-Total'] = str(result.total)
    resp['X-Backup-Written'] = str(result.written)
    return resp

ipd_backup.cls.throttle_scope = 'backup'
