"""
Availability calculator.

Answers "which start times are already taken on this day" for the
authenticated doctor, and lays those over the fixed daily slot grid.

Rules:
- Day bounds are 00:00:00.000000 - 23:59:59.999999 in the clinic timezone
  (``settings.TIME_ZONE``); times are rendered in the same zone.
- Appointments with status ``cancelled`` or no status never occupy a slot.
- A slot counts as booked only when an appointment starts exactly on it.
  An appointment spanning a slot without starting on it does not block it.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from django.utils import timezone
from django.utils.dateparse import parse_date

from medpoc_backend.appointments.models import Appointment
from medpoc_backend.core.context import DoctorContext
from medpoc_backend.core.exceptions import InvalidPracticeData


SLOT_START = time(9, 0)
SLOT_END = time(18, 0)
SLOT_STEP_MINUTES = 15


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

def clinic_timezone():
    return timezone.get_default_timezone()


def parse_day(value: str | None, *, field: str = 'date') -> date:
    """Parse a ``YYYY-MM-DD`` query value."""
    if not value:
        raise InvalidPracticeData('Date is required', field=field)
    try:
        parsed = parse_date(value.strip())
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidPracticeData('Invalid date, expected YYYY-MM-DD', field=field)
    return parsed


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Aware [start, end] of ``day`` in the clinic timezone."""
    tz = clinic_timezone()
    start = timezone.make_aware(datetime.combine(day, time.min), tz)
    end = timezone.make_aware(datetime.combine(day, time.max), tz)
    return start, end


def format_slot(dt: datetime) -> str:
    return timezone.localtime(dt, clinic_timezone()).strftime('%H:%M')


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def occupying_appointments(ctx: DoctorContext, day: date):
    start, end = day_bounds(day)
    return (
        Appointment.objects.using('default')
        .filter(
            doctor_id=ctx.doctor_id,
            scheduled_at__isnull=False,
            scheduled_at__gte=start,
            scheduled_at__lte=end,
            status__isnull=False,
        )
        .exclude(status=Appointment.Status.CANCELLED)
        .order_by('scheduled_at', 'id')
    )


def booked_times_for_date(ctx: DoctorContext, day: date) -> list[str]:
    """Sorted "HH:mm" start times of the doctor's occupying appointments.

    Duplicates are kept; two appointments at 10:00 yield ``["10:00", "10:00"]``.
    """
    times = occupying_appointments(ctx, day).values_list('scheduled_at', flat=True)
    return [format_slot(dt) for dt in times]


def slot_grid() -> list[str]:
    """The fixed daily grid: 09:00, 09:15, ... 18:00 (37 slots)."""
    slots = []
    current = datetime.combine(date.min, SLOT_START)
    last = datetime.combine(date.min, SLOT_END)
    step = timedelta(minutes=SLOT_STEP_MINUTES)
    while current <= last:
        slots.append(current.strftime('%H:%M'))
        current += step
    return slots


def slots_for_date(ctx: DoctorContext, day: date) -> list[dict]:
    booked = set(booked_times_for_date(ctx, day))
    return [{'time': slot, 'booked': slot in booked} for slot in slot_grid()]
