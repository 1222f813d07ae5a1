"""
Project-wide DRF exception handler.

Every API error leaves the service as::

    {"error": "<code>", "message": "<human readable>", "status": <int>}

Serializer validation errors keep their per-field messages under ``detail``
so the register UI can highlight the offending input.
"""
from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions
from rest_framework.exceptions import ValidationError
from rest_framework.views import exception_handler


def camp_exception_handler(exc, context):
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        response.data = {
            'error': 'invalid',
            'message': 'Request validation failed.',
            'status': response.status_code,
            'detail': response.data,
        }
        return response

    codes = exc.get_codes() if hasattr(exc, 'get_codes') else None
    detail = getattr(exc, 'detail', None)
    response.data = {
        'error': codes if isinstance(codes, str) else 'error',
        'message': str(detail) if detail is not None else str(exc),
        'status': response.status_code,
    }
    return response
