import logging
import time

from django.conf import settings
from django.db import connection

logger = logging.getLogger(__name__)


class RequestTimingMiddleware:
    """
    Logs wall time and database time per request. Only active with DEBUG,
    where Django records executed queries.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not settings.DEBUG:
            return self.get_response(request)

        started = time.perf_counter()
        first_query = len(connection.queries)

        response = self.get_response(request)

        elapsed = time.perf_counter() - started
        queries = connection.queries[first_query:]
        db_time = sum(float(q["time"]) for q in queries)

        logger.info(
            f"{request.method} {request.path} -> {response.status_code} "
            f"in {elapsed:.3f}s (db {db_time:.3f}s, {len(queries)} queries)"
        )
        return response
