"""Ownership-scoped prescription repository.

Prescription items are always written as a batch together with their
prescription: created with it, replaced as a whole on update and deleted
before it. Each of these runs in a single transaction.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from django.db import transaction
from django.utils import timezone

from medpoc_backend.appointments.services.appointments import get_appointment
from medpoc_backend.core.context import DoctorContext
from medpoc_backend.core.exceptions import AccessDenied, InvalidPracticeData, ResourceNotFound
from medpoc_backend.patients.services import get_linked_patient
from medpoc_backend.prescriptions.models import Prescription, PrescriptionItem

logger = logging.getLogger(__name__)


def _check_access(ctx: DoctorContext, prescription: Prescription | None, lookup: Any) -> Prescription:
    if prescription is None:
        raise ResourceNotFound('Prescription', lookup)
    if not ctx.owns(prescription):
        raise AccessDenied()
    return prescription


def _resolve_references(ctx: DoctorContext, data: dict[str, Any], patient=None) -> dict[str, Any]:
    """Replace patient/appointment ids by rows the doctor owns."""
    if 'patient' in data:
        data['patient'] = get_linked_patient(ctx, data['patient'])
        patient = data['patient']

    appointment_id = data.get('appointment')
    if appointment_id is not None:
        appointment = get_appointment(ctx, appointment_id)
        if patient is not None and appointment.patient_id != patient.id:
            raise InvalidPracticeData('Appointment belongs to a different patient', field='appointment_id')
        data['appointment'] = appointment
    return data


def _write_items(prescription: Prescription, items: Iterable[dict[str, Any]]) -> list[PrescriptionItem]:
    return PrescriptionItem.objects.using('default').bulk_create(
        [PrescriptionItem(prescription=prescription, **item) for item in items]
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def list_prescriptions(ctx: DoctorContext, *, patient_id: int | None = None):
    qs = (
        Prescription.objects.using('default')
        .filter(doctor_id=ctx.doctor_id)
        .select_related('patient')
        .prefetch_related('items')
    )
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    return qs.order_by('-prescribed_at', '-id')


def get_prescription(ctx: DoctorContext, pk: int) -> Prescription:
    prescription = (
        Prescription.objects.using('default')
        .select_related('patient', 'doctor')
        .prefetch_related('items')
        .filter(pk=pk)
        .first()
    )
    return _check_access(ctx, prescription, pk)


def prescription_items(ctx: DoctorContext, pk: int):
    prescription = get_prescription(ctx, pk)
    return PrescriptionItem.objects.using('default').filter(prescription=prescription).order_by('id')


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def create_prescription(
    ctx: DoctorContext,
    data: dict[str, Any],
    items: Iterable[dict[str, Any]] = (),
) -> Prescription:
    data = _resolve_references(ctx, dict(data))
    data.setdefault('prescribed_at', None)
    if data['prescribed_at'] is None:
        data['prescribed_at'] = timezone.now()

    with transaction.atomic(using='default'):
        prescription = Prescription.objects.using('default').create(doctor_id=ctx.doctor_id, **data)
        _write_items(prescription, items)

    logger.debug('prescription created id=%s doctor_id=%s', prescription.id, ctx.doctor_id)
    return prescription


def update_prescription(
    ctx: DoctorContext,
    pk: int,
    data: dict[str, Any],
    items: Iterable[dict[str, Any]] | None = None,
) -> Prescription:
    """Update the record; ``items``, when given, replace the whole batch."""
    prescription = get_prescription(ctx, pk)
    data = _resolve_references(ctx, dict(data), patient=prescription.patient)

    # a new patient must not keep the previous patient's appointment
    if 'patient' in data and 'appointment' not in data and prescription.appointment_id is not None:
        if prescription.appointment.patient_id != data['patient'].id:
            raise InvalidPracticeData('Appointment belongs to a different patient', field='appointment_id')

    with transaction.atomic(using='default'):
        for attr, value in data.items():
            setattr(prescription, attr, value)
        prescription.save(using='default')

        if items is not None:
            PrescriptionItem.objects.using('default').filter(prescription=prescription).delete()
            _write_items(prescription, items)

    return get_prescription(ctx, pk)


def delete_prescription(ctx: DoctorContext, pk: int) -> Prescription:
    prescription = get_prescription(ctx, pk)
    with transaction.atomic(using='default'):
        PrescriptionItem.objects.using('default').filter(prescription_id=prescription.id).delete()
        prescription.delete(using='default')
    return prescription


def render_prescription_pdf(ctx: DoctorContext, pk: int) -> tuple[Prescription, bytes]:
    """Return the prescription together with its rendered PDF."""
    from medpoc_backend.prescriptions.pdf import build_prescription_pdf

    prescription = get_prescription(ctx, pk)
    return prescription, build_prescription_pdf(prescription, list(prescription.items.all()))
