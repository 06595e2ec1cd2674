"""
Write the discharged-admission backup ZIP to disk.

Same archive as ``POST /api/ipd/backup`` but without the HTTP round trip,
for scheduled jobs::

    python manage.py backup_ipd --start 2024-01-01 --end 2024-01-31 --output /backups
"""
import datetime as dt
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from records.services.backup import run_backup
from records.services.pages import SOURCES, SOURCE_GRANULAR


def _date(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        raise CommandError(f'Invalid date: {value!r} (expected YYYY-MM-DD)')


class Command(BaseCommand):
    help = 'Back up discharged IPD records in a date range as a ZIP of PDFs'

    def add_arguments(self, parser):
        parser.add_argument('--start', required=True, help='First discharge date (YYYY-MM-DD)')
        parser.add_argument('--end', required=True, help='Last discharge date (YYYY-MM-DD)')
        parser.add_argument('--source', choices=SOURCES, default=SOURCE_GRANULAR)
        parser.add_argument('--output', default='.', help='Directory the ZIP is written to')

    def handle(self, *args, **options):
        start = _date(options['start'])
        end = _date(options['end'])
        if end < start:
            raise CommandError('--end must not be before --start')
        out_dir = Path(options['output'])
        out_dir.mkdir(parents=True, exist_ok=True)

        def progress(completed, total, message):
            self.stdout.write(message)

        result = run_backup(start, end, options['source'], on_progress=progress)
        if result is None:
            self.stdout.write(self.style.WARNING('No discharged patients found in this date range.'))
            return

        path = out_dir / result.filename
        path.write_bytes(result.content)
        if result.failed:
            self.stdout.write(self.style.WARNING(f'Failed IPD ids: {", ".join(map(str, result.failed))}'))
        self.stdout.write(self.style.SUCCESS(f'{result.written}/{result.total} records written to {path}'))
