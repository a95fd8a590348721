"""
Exception types and DRF exception handling for PropDesk Backend.

Domain errors raised by the services:
- WorkOrderValidationError: missing/invalid fields, raised before any write
- TransitionError: lifecycle precondition not met or illegal move
- NotFoundError: unknown or deleted record
- TransportFailure: a subscriber connection can no longer take events

All of them share the `PropDeskAPIException` base so the REST layer can
render them with one consistent error envelope.
"""

import logging
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status

security_logger = logging.getLogger('propdesk.security')


class PropDeskAPIException(Exception):
    """Base exception class for PropDesk-specific errors."""

    default_code = 'ERROR'
    default_message = 'An error occurred.'
    default_status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=None, code=None, status_code=None, details=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status_code
        self.details = details
        super().__init__(self.message)


class WorkOrderValidationError(PropDeskAPIException):
    """Raised when a work order create/edit payload is incomplete or invalid."""
    default_code = 'VALIDATION_ERROR'
    default_message = 'Work order data is invalid.'
    default_status_code = status.HTTP_400_BAD_REQUEST


class TransitionError(PropDeskAPIException):
    """Raised when a requested status change is not allowed."""
    default_code = 'INVALID_TRANSITION'
    default_message = 'This status change is not allowed.'
    default_status_code = status.HTTP_409_CONFLICT

    def __init__(self, message=None, from_status=None, to_status=None, **kwargs):
        self.from_status = from_status
        self.to_status = to_status
        details = kwargs.pop('details', None) or {
            'from_status': from_status,
            'to_status': to_status,
        }
        super().__init__(message, details=details, **kwargs)


class NotFoundError(PropDeskAPIException):
    """Raised when operating on a missing or deleted record."""
    default_code = 'NOT_FOUND'
    default_message = 'The requested resource was not found.'
    default_status_code = status.HTTP_404_NOT_FOUND


class TransportFailure(PropDeskAPIException):
    """Raised by a subscriber whose connection dropped or overflowed."""
    default_code = 'TRANSPORT_FAILURE'
    default_message = 'Notification connection lost.'
    default_status_code = status.HTTP_503_SERVICE_UNAVAILABLE


# Envelope code and public message per HTTP status; internals never leak
STATUS_ERRORS = {
    400: ('BAD_REQUEST', 'Invalid request. Please check your input.'),
    401: ('UNAUTHORIZED', 'Authentication required.'),
    403: ('FORBIDDEN', 'You do not have permission to perform this action.'),
    404: ('NOT_FOUND', 'The requested resource was not found.'),
    405: ('METHOD_NOT_ALLOWED', 'This method is not allowed.'),
    406: ('NOT_ACCEPTABLE', 'Requested content type is not available.'),
    409: ('CONFLICT', 'Request conflicts with the current state.'),
    429: ('RATE_LIMIT_EXCEEDED', 'Too many requests. Please try again later.'),
    500: ('INTERNAL_ERROR', 'An internal error occurred. Please try again later.'),
    503: ('SERVICE_UNAVAILABLE', 'Service temporarily unavailable.'),
}

SECURITY_STATUSES = (401, 403, 429)


def custom_exception_handler(exc, context):
    """
    Render every error with the same envelope:

    {
        "success": false,
        "error": {
            "code": "INVALID_TRANSITION",
            "message": "Cannot move a work order from Active to Done. ...",
            "details": {...}   (validation/transition errors only)
        }
    }
    """
    if isinstance(exc, PropDeskAPIException):
        return Response(_envelope(exc.code, exc.message, exc.details), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    code, message = STATUS_ERRORS.get(response.status_code, ('UNKNOWN_ERROR', 'An error occurred.'))
    detail = getattr(exc, 'detail', None)
    details = None

    if response.status_code == 400:
        message = _first_validation_message(detail) or message
        if isinstance(detail, dict):
            details = detail

    if response.status_code in SECURITY_STATUSES:
        _log_security_event(exc, context.get('request'), context.get('view'), response.status_code)

    response.data = _envelope(code, message, details)
    return response


def _envelope(code, message, details=None):
    error = {'code': code, 'message': message}
    if details:
        error['details'] = details
    return {'success': False, 'error': error}


def _first_validation_message(detail):
    """`field - message` of the first field error, or a plain string detail."""
    if isinstance(detail, str):
        return detail
    if isinstance(detail, dict):
        for name, errors in detail.items():
            if isinstance(errors, list) and errors:
                return f"Validation error: {name} - {errors[0]}"
    return None


def _log_security_event(exc, request, view, status_code):
    user = getattr(request, 'user', None)
    actor = str(user.pk) if user is not None and user.is_authenticated else 'anonymous'

    security_logger.warning(
        f"SECURITY: status={status_code} user={actor} ip={get_client_ip(request)} "
        f"view={type(view).__name__ if view else 'unknown'} exception={type(exc).__name__}"
    )


def get_client_ip(request):
    """Client IP, honouring X-Forwarded-For from the proxy."""
    if not request:
        return 'unknown'

    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')
