import logging
import time

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        started = time.monotonic()
        response = self.get_response(request)

        if request.path.startswith('/api/'):
            elapsed_ms = (time.monotonic() - started) * 1000
            # never log bodies, token requests carry credentials
            logger.info(
                "%s %s -> %s (%.1f ms)",
                request.method, request.path, response.status_code, elapsed_ms
            )

        return response
