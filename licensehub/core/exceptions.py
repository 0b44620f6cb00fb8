"""
Domain exceptions and the project-wide DRF exception handler.

Services raise these exceptions instead of returning tagged error dicts; the
handler renders every failure as ``{"error": "..."}`` with a status code that
matches the failure class.
"""
import logging

from rest_framework import exceptions, status
from rest_framework.permissions import SAFE_METHODS
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class NotFound(exceptions.NotFound):
    default_detail = 'Not found'


class DomainValidationError(exceptions.APIException):
    """A request that passed schema validation but breaks a business rule"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request'
    default_code = 'invalid'


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict'
    default_code = 'conflict'


def first_error_message(detail):
    """Pull the first human-readable message out of a DRF error structure"""
    if isinstance(detail, dict):
        for value in detail.values():
            message = first_error_message(value)
            if message:
                return message
        return None
    if isinstance(detail, (list, tuple)):
        for value in detail:
            message = first_error_message(value)
            if message:
                return message
        return None
    return str(detail) if detail is not None else None


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    request = context.get('request')

    if response is None:
        view = context.get('view')
        logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}")
        response = Response({'error': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    elif isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        response.data = {'error': 'Unauthorized'}
    elif isinstance(exc, exceptions.ValidationError):
        details = response.data
        response.data = {
            'error': first_error_message(details) or 'Invalid request',
            'details': details,
        }
    else:
        detail = response.data.get('detail') if isinstance(response.data, dict) else response.data
        response.data = {'error': first_error_message(detail) or 'Request failed'}

    if request is not None and request.method not in SAFE_METHODS:
        response.data = {'success': False, **response.data}
    return response
