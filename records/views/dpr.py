from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsAdminRole
from ..serializers.dpr import DPRSendSerializer, MISSING
from ..services.audit import try_log_action
from ..services.dpr import send_dpr


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
@parser_classes([MultiPartParser, FormParser])
def send_dpr_view(request):
    """Upload a DPR PDF and deliver it on WhatsApp."""
    s = DPRSendSerializer(data=request.data)
    if not s.is_valid():
        messages = [str(m) for errs in s.errors.values() for m in errs]
        if MISSING in messages:
            raise ValidationError(MISSING)
        raise ValidationError(s.errors)
    vd = s.validated_data
    result = send_dpr(vd['pdfFile'].read(), vd['caption'], vd['filename'], request.build_absolute_uri)
    try_log_action(user=request.user, action='dpr_send', object_type='dpr', detail={'filename': vd['filename']})
    return Response({'ok': True, 'message': 'DPR sent successfully', **result})
