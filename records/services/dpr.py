"""
Daily progress report (DPR) delivery over the WhatsApp gateway.

The PDF is stored under ``dpr/`` in the default storage so the gateway
can fetch it from a public URL, then a document message pointing at
that URL is posted to ``WHATSAPP_API_URL``.
"""
from __future__ import annotations

import json
from typing import Callable, Optional

import requests
from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from records.exceptions import UpstreamError
from records.structured_logging import get_logger

logger = get_logger(__name__)

DPR_PREFIX = 'dpr'


def store_pdf(filename: str, content: bytes) -> str:
    """Save ``content`` at ``dpr/<filename>``, replacing any earlier upload."""
    path = f'{DPR_PREFIX}/{filename}'
    if default_storage.exists(path):
        default_storage.delete(path)
    return default_storage.save(path, ContentFile(content))


def error_detail(resp: requests.Response) -> str:
    """Best human readable error from a failed gateway response."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    if isinstance(data, dict):
        for key in ('message', 'error', 'details'):
            if data.get(key):
                v = data[key]
                return v if isinstance(v, str) else json.dumps(v)
    return json.dumps(data)


def send_document(media_url: str, caption: str, filename: str, number: Optional[str] = None) -> dict:
    payload = {
        'number': number or settings.DPR_RECIPIENT_NUMBER,
        'mediatype': 'document',
        'mimetype': 'application/pdf',
        'caption': caption,
        'media': media_url,
        'fileName': filename,
    }
    headers = {'Content-Type': 'application/json', 'apikey': settings.WHATSAPP_API_KEY}
    try:
        r = requests.post(settings.WHATSAPP_API_URL, json=payload, headers=headers,
                          timeout=settings.WHATSAPP_TIMEOUT)
    except requests.RequestException as e:
        logger.error('whatsapp_unreachable', error=str(e))
        raise UpstreamError(f'Failed to send WhatsApp message: {e}')
    if not r.ok:
        detail = error_detail(r)
        logger.error('whatsapp_rejected', status=r.status_code, detail=detail)
        raise UpstreamError(f'Failed to send WhatsApp message: {detail}', status_code=r.status_code)
    try:
        return r.json()
    except ValueError:
        return {'raw': r.text}


def send_dpr(content: bytes, caption: str, filename: str, build_url: Callable[[str], str]) -> dict:
    """Store the PDF and deliver it; ``build_url`` turns a storage URL absolute."""
    path = store_pdf(filename, content)
    media_url = build_url(default_storage.url(path))
    logger.info('dpr_stored', path=path)
    result = send_document(media_url, caption, filename)
    return {'mediaUrl': media_url, 'whatsappResult': result}
