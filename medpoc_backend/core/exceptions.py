"""
Practice-level exceptions and the DRF exception handler.

Service functions (patients/appointments/prescriptions) raise these
exceptions; views let them propagate and ``practice_exception_handler``
translates them into the uniform response envelope::

    {"success": false, "error": "<message>"}

Unknown exceptions are logged and answered with a generic 500 message.
"""

from __future__ import annotations

import logging
from typing import Any

from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class PracticeError(Exception):
    """Base exception for all practice (domain) errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Request failed'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {'success': False, 'error': self.message}


class OnboardingRequired(PracticeError):
    """Authenticated, but no doctor profile has been completed yet."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Onboarding required'

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result['needsOnboarding'] = True
        return result


class AccessDenied(PracticeError):
    """The resource exists but belongs to another doctor."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Access denied'


class ResourceNotFound(PracticeError):
    """
    Raised when a record does not exist.

    Attributes:
        resource: Human readable model name ('Patient', 'Appointment', ...)
        lookup: The id/uuid that was requested
    """

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, lookup: Any = None):
        self.resource = resource
        self.lookup = lookup
        super().__init__(f'{resource} not found')


class SlotAlreadyBooked(PracticeError):
    """Raised when a non-cancelled appointment already starts at the requested time."""

    status_code = status.HTTP_409_CONFLICT
    default_message = 'This time slot is already booked.'

    def __init__(self, *, scheduled_at: str, conflicting_id: int | None = None):
        self.scheduled_at = scheduled_at
        self.conflicting_id = conflicting_id
        super().__init__()

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result['scheduled_at'] = self.scheduled_at
        if self.conflicting_id is not None:
            result['conflicting_id'] = self.conflicting_id
        return result


class InvalidPracticeData(PracticeError):
    """
    Raised when input is structurally valid but semantically wrong
    (e.g. a date that cannot be parsed, a missing required query parameter).
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result['field'] = self.field
        return result


def _flatten_errors(detail) -> list[str]:
    if isinstance(detail, dict):
        messages = []
        for key, value in detail.items():
            for msg in _flatten_errors(value):
                messages.append(msg if key == 'non_field_errors' else f'{key}: {msg}')
        return messages
    if isinstance(detail, (list, tuple)):
        messages = []
        for value in detail:
            messages.extend(_flatten_errors(value))
        return messages
    return [str(detail)]


def practice_exception_handler(exc, context):
    """DRF ``EXCEPTION_HANDLER`` producing the ``{success, error}`` envelope."""

    if isinstance(exc, PracticeError):
        return Response(exc.to_dict(), status=exc.status_code)

    if isinstance(exc, drf_exceptions.ValidationError):
        return Response(
            {
                'success': False,
                'error': 'Validation failed',
                'details': _flatten_errors(exc.detail),
            },
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
        response = exception_handler(exc, context)
        response.data = {'success': False, 'error': 'Unauthorized'}
        return response

    if isinstance(exc, Http404):
        return Response({'success': False, 'error': 'Not found'}, status=status.HTTP_404_NOT_FOUND)

    response = exception_handler(exc, context)
    if response is not None:
        detail = response.data.get('detail') if isinstance(response.data, dict) else None
        response.data = {'success': False, 'error': str(detail or 'Request failed')}
        return response

    view = context.get('view')
    logger.exception(
        'Unhandled error in %s',
        view.__class__.__name__ if view is not None else 'unknown view',
    )
    message = getattr(view, 'failure_message', None) or 'Internal server error'
    return Response({'success': False, 'error': message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
