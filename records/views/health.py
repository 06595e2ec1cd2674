from django.db import connections
from django.http import JsonResponse

from records.structured_logging import get_logger

logger = get_logger(__name__)


def healthz(request):
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        return JsonResponse({'ok': True, 'db': bool(row and row[0] == 1)})
    except Exception as e:
        logger.error('healthz_db_failed', error=str(e))
        return JsonResponse({'ok': False, 'error': str(e)}, status=500)
