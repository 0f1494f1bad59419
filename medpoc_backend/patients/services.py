"""Ownership-scoped data access for patients.

Every function takes the resolved DoctorContext as its first argument.
A doctor sees a patient only through a DoctorPatient row; lookups of
patients that exist but are not linked raise AccessDenied.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from django.db import transaction

from medpoc_backend.core.context import DoctorContext
from medpoc_backend.core.exceptions import AccessDenied, InvalidPracticeData, ResourceNotFound
from medpoc_backend.patients.models import DoctorPatient, Patient

logger = logging.getLogger(__name__)


def _is_linked(ctx: DoctorContext, patient_id: int) -> bool:
    return (
        DoctorPatient.objects.using('default')
        .filter(doctor_id=ctx.doctor_id, patient_id=patient_id)
        .exists()
    )


def _check_access(ctx: DoctorContext, patient: Patient | None, lookup: Any) -> Patient:
    if patient is None:
        raise ResourceNotFound('Patient', lookup)
    if not _is_linked(ctx, patient.id):
        raise AccessDenied()
    return patient


def list_patients(ctx: DoctorContext, search: str | None = None):
    qs = Patient.objects.using('default').filter(doctor_links__doctor_id=ctx.doctor_id)
    if search:
        qs = qs.filter(name__icontains=search.strip())
    return qs.order_by('name', 'id')


def get_patient(ctx: DoctorContext, pk: int) -> Patient:
    patient = Patient.objects.using('default').filter(pk=pk).first()
    return _check_access(ctx, patient, pk)


def get_patient_by_uuid(ctx: DoctorContext, patient_uuid) -> Patient:
    patient = Patient.objects.using('default').filter(uuid=patient_uuid).first()
    return _check_access(ctx, patient, patient_uuid)


def get_linked_patient(ctx: DoctorContext, patient_id) -> Patient:
    """Resolve a patient referenced by an appointment or prescription."""
    if isinstance(patient_id, Patient):
        patient_id = patient_id.pk
    return get_patient(ctx, patient_id)


def create_patient(ctx: DoctorContext, data: dict[str, Any]) -> Patient:
    with transaction.atomic(using='default'):
        patient = Patient.objects.using('default').create(**data)
        DoctorPatient.objects.using('default').create(doctor_id=ctx.doctor_id, patient=patient)

    logger.debug('patient created id=%s doctor_id=%s', patient.id, ctx.doctor_id)
    return patient


def update_patient(ctx: DoctorContext, pk: int, data: dict[str, Any]) -> Patient:
    patient = get_patient(ctx, pk)
    for attr, value in data.items():
        setattr(patient, attr, value)
    patient.save(using='default')
    return patient


def _unlink_and_maybe_delete(ctx: DoctorContext, patient: Patient) -> bool:
    """Remove the doctor's link together with the doctor's own records for the patient.

    The patient row is deleted only when no other doctor is linked and no
    appointment or prescription of any doctor still references it.
    Returns True when the patient row itself was deleted.
    """
    from medpoc_backend.appointments.models import Appointment
    from medpoc_backend.prescriptions.models import Prescription, PrescriptionItem

    own = {'doctor_id': ctx.doctor_id, 'patient_id': patient.id}
    PrescriptionItem.objects.using('default').filter(
        prescription__doctor_id=ctx.doctor_id, prescription__patient_id=patient.id
    ).delete()
    Prescription.objects.using('default').filter(**own).delete()
    Appointment.objects.using('default').filter(**own).delete()
    DoctorPatient.objects.using('default').filter(**own).delete()

    if (
        DoctorPatient.objects.using('default').filter(patient_id=patient.id).exists()
        or Appointment.objects.using('default').filter(patient_id=patient.id).exists()
        or Prescription.objects.using('default').filter(patient_id=patient.id).exists()
    ):
        return False

    patient.delete(using='default')
    return True


def delete_patient(ctx: DoctorContext, pk: int) -> bool:
    patient = get_patient(ctx, pk)
    with transaction.atomic(using='default'):
        return _unlink_and_maybe_delete(ctx, patient)


def delete_patients(ctx: DoctorContext, pks: Iterable[int]) -> int:
    """Batch delete. Either every patient is removed or none is."""
    pks = list(dict.fromkeys(pks))
    if not pks:
        raise InvalidPracticeData('No patient ids given', field='ids')

    patients = [get_patient(ctx, pk) for pk in pks]
    with transaction.atomic(using='default'):
        for patient in patients:
            _unlink_and_maybe_delete(ctx, patient)
    return len(patients)


def patient_appointments(ctx: DoctorContext, patient_uuid):
    from medpoc_backend.appointments.models import Appointment

    patient = get_patient_by_uuid(ctx, patient_uuid)
    return (
        Appointment.objects.using('default')
        .filter(doctor_id=ctx.doctor_id, patient=patient)
        .select_related('patient')
        .order_by('scheduled_at', 'id')
    )
