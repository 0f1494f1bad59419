import logging

from rest_framework.response import Response

logger = logging.getLogger(__name__)


def log_patient_action(user, action, patient_id=None, meta=None):
    """Write one structured log line per patient-data access.

    There is no audit table; the log stream is the only record.
    """

    role_name = ''
    role = getattr(user, 'role', None)
    if role is not None:
        role_name = getattr(role, 'name', '') or ''

    logger.info(
        'patient_action action=%s user_id=%s role=%s patient_id=%s meta=%s',
        action,
        getattr(user, 'id', None),
        role_name,
        patient_id,
        meta or {},
    )


def success_response(data=None, status=200, **extra):
    """Build the ``{"success": true, "data": ...}`` envelope."""

    payload = {'success': True, 'data': data}
    payload.update(extra)
    return Response(payload, status=status)
