"""
Request logging middleware for PropDesk Backend.

Writes one line per API request to the `propdesk.audit` logger. Work order
history is recorded separately by `audit.services.HistoryRecorder`.
"""

import logging
import time

from .exceptions import get_client_ip

audit_logger = logging.getLogger('propdesk.audit')


class RequestAuditMiddleware:
    """
    Log method, path, user, status code and duration of every request.

    Long-lived notification streams are logged when the response object is
    returned, not when the client disconnects.
    """

    skip_prefixes = (
        '/static/',
        '/media/',
        '/health/',
        '/favicon.ico',
    )

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        start_time = time.monotonic()
        response = self.get_response(request)
        duration = time.monotonic() - start_time

        if not request.path.startswith(self.skip_prefixes):
            self._log_request(request, response, duration)

        return response

    def _log_request(self, request, response, duration):
        user_id = 'anonymous'
        if hasattr(request, 'user') and request.user.is_authenticated:
            user_id = str(request.user.id)

        log_data = {
            'method': request.method,
            'path': request.path,
            'user_id': user_id,
            'status_code': response.status_code,
            'duration_ms': round(duration * 1000, 2),
            'ip_address': get_client_ip(request),
        }

        if response.status_code >= 500:
            audit_logger.error(f"API Request: {log_data}")
        elif response.status_code >= 400:
            audit_logger.warning(f"API Request: {log_data}")
        else:
            audit_logger.info(f"API Request: {log_data}")
