"""
Bulk backup of discharged admissions.

For every admission discharged inside a date range one PDF is produced:
its drawing pages followed by the written discharge summary.  All PDFs
are collected into a single ZIP archive.

Database reads happen up front on the calling thread.  Rendering only
needs the gathered page data and HTTP access to the images, so it runs
in small chunks on a thread pool; every chunk finishes before the next
one starts, which keeps memory bounded on large ranges.
"""
from __future__ import annotations

import datetime as dt
import io
import re
import zipfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings

from records.models import IPDRegistration
from records.services import pages as page_service
from records.services.assets import BACKUP_COMPRESSION
from records.services.composer import compose_pages, draw_no_pages
from records.services.discharge import append_discharge_summary, load_letterhead, summary_from
from records.services.drawing import DrawingPage
from records.services.pdfcanvas import PageCanvas
from records.structured_logging import get_logger

logger = get_logger(__name__)

_UNSAFE_NAME = re.compile(r'[^a-zA-Z0-9]')


@dataclass
class BackupItem:
    ipd_id: int
    patient_name: str
    discharge_date: Optional[dt.date]
    pages: list[DrawingPage] = field(default_factory=list)
    summary: Optional[dict] = None

    @property
    def filename(self) -> str:
        return pdf_filename(self.patient_name, self.discharge_date)


@dataclass
class BackupResult:
    filename: str
    content: bytes
    total: int
    written: int
    failed: list[int] = field(default_factory=list)


ProgressCallback = Callable[[int, int, str], None]


def pdf_filename(patient_name: Optional[str], discharge_date: Optional[dt.date]) -> str:
    safe = _UNSAFE_NAME.sub('_', patient_name or 'Unknown')
    date_part = discharge_date.isoformat() if discharge_date else 'UnknownDate'
    return f'{safe}_Discharge_{date_part}.pdf'


def zip_filename(start: dt.date, end: dt.date) -> str:
    return f'IPD_Backup_{start.isoformat()}_to_{end.isoformat()}_Full.zip'


def discharged_between(start: dt.date, end: dt.date):
    return (
        IPDRegistration.objects.select_related('patient')
        .filter(discharge_date__gte=start, discharge_date__lte=end)
        .order_by('discharge_date', 'ipd_id')
    )


def gather(registration: IPDRegistration, source: str) -> BackupItem:
    """Read everything a backup PDF needs for one admission."""
    pages = page_service.collect_pages(registration, source)
    # the written summary only exists on the legacy row, whatever the page source
    health = page_service.health_detail_for(registration)
    summary = summary_from(health.discharge_summary_written) if health else None
    return BackupItem(
        ipd_id=registration.ipd_id,
        patient_name=registration.patient.name if registration.patient else 'Unknown',
        discharge_date=registration.discharge_date,
        pages=pages,
        summary=summary,
    )


def render_item(item: BackupItem) -> bytes:
    pc = PageCanvas(title=item.filename)
    if item.pages:
        compose_pages(pc, item.pages, BACKUP_COMPRESSION)
    else:
        draw_no_pages(pc)
    if item.summary:
        append_discharge_summary(pc, item.summary, load_letterhead())
    return pc.finish()


def broadcast_progress(job_id: str, completed: int, total: int, message: str) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    event = {
        'type': 'backup.progress',
        'completed': completed,
        'total': total,
        'percent': round(completed * 100 / total) if total else 100,
        'message': message,
    }
    async_to_sync(channel_layer.group_send)(f'backup.{job_id}', event)


def _unique_name(name: str, used: set[str]) -> str:
    if name not in used:
        return name
    stem = name[:-4]
    n = 2
    while f'{stem}_{n}.pdf' in used:
        n += 1
    return f'{stem}_{n}.pdf'


def run_backup(start: dt.date, end: dt.date, source: str = page_service.SOURCE_GRANULAR,
               job_id: Optional[str] = None, on_progress: Optional[ProgressCallback] = None,
               concurrency: Optional[int] = None) -> Optional[BackupResult]:
    """Build the backup archive for admissions discharged in ``[start, end]``.

    Returns ``None`` when nothing was discharged in the range.  A record
    that fails to render is logged and left out of the archive.
    """
    registrations = list(discharged_between(start, end))
    if not registrations:
        return None

    total = len(registrations)
    items = [gather(reg, source) for reg in registrations]
    concurrency = max(1, concurrency or settings.BACKUP_CONCURRENCY)
    logger.info('backup_started', start=start.isoformat(), end=end.isoformat(),
                source=source, total=total, job=job_id)

    def report(completed: int, message: str) -> None:
        if on_progress:
            on_progress(completed, total, message)
        if job_id:
            broadcast_progress(job_id, completed, total, message)

    report(0, f'Found {total} records. Starting backup...')

    buf = io.BytesIO()
    used: set[str] = set()
    failed: list[int] = []
    completed = 0
    with zipfile.ZipFile(buf, 'w', compression=zipfile.ZIP_DEFLATED) as zf, \
            ThreadPoolExecutor(max_workers=concurrency) as pool:
        for i in range(0, total, concurrency):
            chunk = items[i:i + concurrency]
            futures = [pool.submit(render_item, item) for item in chunk]
            for item, future in zip(chunk, futures):
                try:
                    pdf = future.result()
                    name = _unique_name(item.filename, used)
                    used.add(name)
                    zf.writestr(name, pdf)
                except Exception:
                    logger.exception('backup_record_failed', ipd_id=item.ipd_id, patient=item.patient_name)
                    failed.append(item.ipd_id)
                completed += 1
                report(completed, f'Processing: {item.patient_name} ({completed}/{total})')

    logger.info('backup_finished', total=total, written=total - len(failed), failed=len(failed), job=job_id)
    return BackupResult(
        filename=zip_filename(start, end),
        content=buf.getvalue(),
        total=total,
        written=total - len(failed),
        failed=failed,
    )
