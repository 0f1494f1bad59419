"""
Ownership-scoped appointment repository.

Architecture Rules:
- Every function takes the resolved DoctorContext; queries always filter by
  ``ctx.doctor_id``.
- Update / cancel / delete re-fetch the row and verify ownership first.
- The referenced patient must be linked to the doctor.
- Exceptions are the practice exceptions from core.exceptions; views never
  catch them, the DRF exception handler renders them.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any

from django.utils import timezone

from medpoc_backend.appointments.models import Appointment
from medpoc_backend.appointments.services.availability import clinic_timezone, day_bounds
from medpoc_backend.core.context import DoctorContext
from medpoc_backend.core.exceptions import AccessDenied, InvalidPracticeData, ResourceNotFound, SlotAlreadyBooked
from medpoc_backend.patients.services import get_linked_patient

logger = logging.getLogger(__name__)

UPCOMING_DAYS = 7


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

def _scoped(ctx: DoctorContext):
    return (
        Appointment.objects.using('default')
        .filter(doctor_id=ctx.doctor_id)
        .select_related('patient')
    )


def _check_access(ctx: DoctorContext, appointment: Appointment | None, lookup: Any) -> Appointment:
    if appointment is None:
        raise ResourceNotFound('Appointment', lookup)
    if not ctx.owns(appointment):
        raise AccessDenied()
    return appointment


def resolve_scheduled_at(data: dict[str, Any]) -> datetime | None:
    """Pick ``scheduled_at`` or combine form fields ``date`` + ``time``.

    Form fields are wall-clock values in the clinic timezone.
    """
    scheduled_at = data.pop('scheduled_at', None)
    day = data.pop('date', None)
    at = data.pop('time', None)

    if scheduled_at is None and day is not None and at is not None:
        scheduled_at = timezone.make_aware(datetime.combine(day, at), clinic_timezone())
    elif scheduled_at is not None and timezone.is_naive(scheduled_at):
        scheduled_at = timezone.make_aware(scheduled_at, clinic_timezone())
    return scheduled_at


def _ensure_slot_free(ctx: DoctorContext, scheduled_at: datetime | None, *, exclude_id: int | None = None) -> None:
    """Reject a second occupying appointment at the exact same start.

    Occupying means the same as for availability: status set and not cancelled.
    Check-then-insert without a lock: concurrent requests can still both pass.
    """
    if scheduled_at is None:
        return

    qs = (
        Appointment.objects.using('default')
        .filter(doctor_id=ctx.doctor_id, scheduled_at=scheduled_at, status__isnull=False)
        .exclude(status=Appointment.Status.CANCELLED)
    )
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)

    conflicting = qs.order_by('id').first()
    if conflicting is not None:
        raise SlotAlreadyBooked(scheduled_at=scheduled_at.isoformat(), conflicting_id=conflicting.id)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def list_appointments(
    ctx: DoctorContext,
    *,
    day: date | None = None,
    status: str | None = None,
    patient_id: int | None = None,
):
    qs = _scoped(ctx)
    if day is not None:
        start, end = day_bounds(day)
        qs = qs.filter(scheduled_at__gte=start, scheduled_at__lte=end)
    if status:
        qs = qs.filter(status=status)
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    return qs.order_by('scheduled_at', 'id')


def upcoming_appointments(ctx: DoctorContext, *, now: datetime | None = None):
    """Appointments from now until now + 7 days."""
    now = now or timezone.now()
    return (
        _scoped(ctx)
        .filter(scheduled_at__gte=now, scheduled_at__lte=now + timedelta(days=UPCOMING_DAYS))
        .order_by('scheduled_at', 'id')
    )


def today_appointments(ctx: DoctorContext):
    today = timezone.localdate(timezone=clinic_timezone())
    return list_appointments(ctx, day=today)


def get_appointment(ctx: DoctorContext, pk: int) -> Appointment:
    appointment = Appointment.objects.using('default').select_related('patient').filter(pk=pk).first()
    return _check_access(ctx, appointment, pk)


def get_appointment_by_uuid(ctx: DoctorContext, appointment_uuid) -> Appointment:
    appointment = (
        Appointment.objects.using('default').select_related('patient').filter(uuid=appointment_uuid).first()
    )
    return _check_access(ctx, appointment, appointment_uuid)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def create_appointment(ctx: DoctorContext, data: dict[str, Any]) -> Appointment:
    data = dict(data)
    patient = get_linked_patient(ctx, data.pop('patient'))
    scheduled_at = resolve_scheduled_at(data)

    if data.get('status', Appointment.Status.PENDING) != Appointment.Status.CANCELLED:
        _ensure_slot_free(ctx, scheduled_at)

    appointment = Appointment.objects.using('default').create(
        doctor_id=ctx.doctor_id,
        patient=patient,
        scheduled_at=scheduled_at,
        **data,
    )
    logger.debug('appointment created id=%s doctor_id=%s at=%s', appointment.id, ctx.doctor_id, scheduled_at)
    return appointment


def update_appointment(ctx: DoctorContext, pk: int, data: dict[str, Any]) -> Appointment:
    appointment = get_appointment(ctx, pk)
    data = dict(data)
    previous_start = appointment.scheduled_at
    previous_status = appointment.status

    if 'patient' in data:
        appointment.patient = get_linked_patient(ctx, data.pop('patient'))

    if {'scheduled_at', 'date', 'time'} & data.keys():
        if 'scheduled_at' not in data and not ('date' in data and 'time' in data):
            # partial wall-clock change: complete it from the stored value
            current = timezone.localtime(appointment.scheduled_at, clinic_timezone()) if appointment.scheduled_at else None
            if current is None:
                raise InvalidPracticeData('Both date and time are required', field='time' if 'date' in data else 'date')
            data.setdefault('date', current.date())
            data.setdefault('time', current.time().replace(tzinfo=None))
        appointment.scheduled_at = resolve_scheduled_at(data)

    for attr, value in data.items():
        setattr(appointment, attr, value)

    # a move or a reactivation must land on a free slot
    changed = appointment.scheduled_at != previous_start or appointment.status != previous_status
    if changed and appointment.occupies_slot:
        _ensure_slot_free(ctx, appointment.scheduled_at, exclude_id=appointment.id)

    appointment.save(using='default')
    return appointment


def cancel_appointment(ctx: DoctorContext, pk: int) -> Appointment:
    appointment = get_appointment(ctx, pk)
    appointment.status = Appointment.Status.CANCELLED
    appointment.confirmed = False
    appointment.save(using='default', update_fields=['status', 'confirmed', 'updated_at'])
    return appointment


def delete_appointment(ctx: DoctorContext, pk: int) -> Appointment:
    appointment = get_appointment(ctx, pk)
    # prescriptions keep existing without their appointment (SET_NULL)
    appointment.delete(using='default')
    return appointment
