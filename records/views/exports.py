"""
Interactive PDF exports for a single admission.

Every endpoint renders on request and streams the PDF back; images are
re-encoded at the lighter interactive quality.
"""
from __future__ import annotations

import io

from django.http import FileResponse
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import NoRecordsFound
from ..models import IPDRegistration
from ..serializers.export import (
    GroupSelectionSerializer, PageSelectionSerializer, PreviewQuerySerializer, SourceQuerySerializer,
)
from ..services import pages as page_service
from ..services.assets import EXPORT_COMPRESSION
from ..services.audit import try_log_action
from ..services.composer import render_pages_pdf
from ..services.discharge import load_letterhead, render_discharge_pdf, summary_from
from ..structured_logging import get_logger

logger = get_logger(__name__)


def _registration(ipd_id: int) -> IPDRegistration:
    return get_object_or_404(IPDRegistration.objects.select_related('patient'), ipd_id=ipd_id)


def _pdf_response(content: bytes, filename: str) -> FileResponse:
    return FileResponse(io.BytesIO(content), content_type='application/pdf', filename=filename)


def _pages_pdf(request, reg: IPDRegistration, pages, action: str, detail: dict) -> FileResponse:
    if not pages:
        raise NoRecordsFound('No pages found.')
    name = reg.patient.name if reg.patient else 'Unknown'
    content = render_pages_pdf(pages, EXPORT_COMPRESSION, title=f'{name} IPD {reg.ipd_id}')
    try_log_action(user=request.user, action=action, object_type='ipd_registration', object_id=reg.ipd_id,
                   detail={'pages': len(pages), **detail})
    logger.info('pdf_exported', ipd_id=reg.ipd_id, pages=len(pages), action=action)
    return _pdf_response(content, f'{name}_{reg.ipd_id}.pdf')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def record_pdf(request, ipd_id: int):
    """Whole admission file from one page store."""
    q = SourceQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    source = q.validated_data['source']
    reg = _registration(ipd_id)
    pages = page_service.collect_pages(reg, source)
    return _pages_pdf(request, reg, pages, 'export_record', {'source': source})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def record_groups(request, ipd_id: int):
    q = SourceQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    reg = _registration(ipd_id)
    groups = page_service.available_groups(reg, q.validated_data['source'])
    return Response({'ok': True, 'data': groups})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def groups_pdf(request, ipd_id: int):
    s = GroupSelectionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    source = s.validated_data['source']
    groups = s.validated_data['groups']
    reg = _registration(ipd_id)
    pages = page_service.collect_pages(reg, source, groups)
    return _pages_pdf(request, reg, pages, 'export_groups', {'source': source, 'groups': groups})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def record_preview(request, ipd_id: int):
    """Pages of both stores grouped for selection; each page carries its key."""
    q = PreviewQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    reg = _registration(ipd_id)
    grouped = page_service.preview_groups(reg, q.validated_data['source'])
    return Response({
        'ok': True,
        'patient': {'name': reg.patient.name if reg.patient else None, 'uhid': reg.patient_id},
        'data': [
            {'groupName': name, 'pages': [p.to_preview() for p in pages]}
            for name, pages in grouped
        ],
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def pages_pdf(request, ipd_id: int):
    s = PageSelectionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    q = PreviewQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    reg = _registration(ipd_id)
    pages = page_service.select_pages(reg, s.validated_data['keys'], q.validated_data['source'])
    return _pages_pdf(request, reg, pages, 'export_pages', {})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def discharge_summary_pdf(request, ipd_id: int):
    reg = _registration(ipd_id)
    health = page_service.health_detail_for(reg)
    if health is None or not health.discharge_summary_written:
        raise NoRecordsFound('No discharge summary data found.')
    summary = summary_from(health.discharge_summary_written)
    if summary is None:
        raise NoRecordsFound('Summary data is empty.')
    content = render_discharge_pdf(summary, load_letterhead())
    try_log_action(user=request.user, action='export_discharge_summary', object_type='ipd_registration',
                   object_id=reg.ipd_id)
    name = reg.patient.name if reg.patient else 'Unknown'
    return _pdf_response(content, f'Discharge_Summary_{name}_{reg.ipd_id}.pdf')
