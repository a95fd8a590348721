"""
Error envelope rendered by the DRF exception handler.
"""
from rest_framework.exceptions import NotAuthenticated, ValidationError

from core.exceptions import (
    NotFoundError,
    TransitionError,
    TransportFailure,
    WorkOrderValidationError,
    custom_exception_handler,
)


class TestDomainErrors:

    def test_transition_error(self):
        response = custom_exception_handler(
            TransitionError('Not allowed.', from_status='active', to_status='done'), {}
        )

        assert response.status_code == 409
        assert response.data == {
            'success': False,
            'error': {
                'code': 'INVALID_TRANSITION',
                'message': 'Not allowed.',
                'details': {'from_status': 'active', 'to_status': 'done'},
            },
        }

    def test_validation_error_details(self):
        exc = WorkOrderValidationError(details={'title': ['This field is required.']})

        response = custom_exception_handler(exc, {})

        assert response.status_code == 400
        assert response.data['error']['code'] == 'VALIDATION_ERROR'
        assert response.data['error']['details'] == {'title': ['This field is required.']}

    def test_not_found_has_no_details(self):
        response = custom_exception_handler(NotFoundError(), {})

        assert response.status_code == 404
        assert 'details' not in response.data['error']

    def test_transport_failure_status(self):
        assert TransportFailure().status_code == 503


class TestFrameworkErrors:

    def test_drf_validation_error(self):
        response = custom_exception_handler(ValidationError({'url': ['Enter a valid URL.']}), {})

        assert response.status_code == 400
        assert response.data['error']['code'] == 'BAD_REQUEST'
        assert response.data['error']['message'] == 'Validation error: url - Enter a valid URL.'

    def test_not_authenticated(self):
        response = custom_exception_handler(NotAuthenticated(), {})

        assert response.status_code == 401
        assert response.data['error']['code'] == 'UNAUTHORIZED'

    def test_unhandled_exception_passes_through(self):
        assert custom_exception_handler(RuntimeError('boom'), {}) is None
