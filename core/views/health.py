import logging

from django.db import DatabaseError, connections
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def healthz(request):
    """Liveness probe: the process is up and the default database answers."""
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
    except DatabaseError as e:
        logger.error('healthz database check failed: %s', e)
        return JsonResponse({'ok': False, 'db': False, 'error': 'database unavailable'}, status=503)
    return JsonResponse({'ok': True, 'db': bool(row and row[0] == 1)})
