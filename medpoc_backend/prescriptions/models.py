import uuid

from django.conf import settings
from django.db import models


class Prescription(models.Model):
    """A prescription written by one doctor for one of their patients.

    Items have no lifecycle of their own; see prescriptions.services.
    """

    uuid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='prescriptions',
    )
    patient = models.ForeignKey(
        'patients.Patient',
        on_delete=models.CASCADE,
        related_name='prescriptions',
    )
    appointment = models.ForeignKey(
        'appointments.Appointment',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='prescriptions',
    )
    prescribed_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'prescriptions_prescription'
        ordering = ['-prescribed_at', '-id']

    def __str__(self) -> str:
        return f"Prescription {self.id} patient={self.patient_id}"


class PrescriptionItem(models.Model):
    uuid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    prescription = models.ForeignKey(
        Prescription,
        on_delete=models.CASCADE,
        related_name='items',
    )
    drug_name = models.CharField(max_length=255)
    dosage = models.CharField(max_length=255, blank=True, default='')
    frequency = models.CharField(max_length=255, blank=True, default='')
    duration = models.CharField(max_length=255, blank=True, default='')
    instructions = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'prescriptions_prescription_item'
        ordering = ['id']

    def __str__(self) -> str:
        return f"{self.drug_name} ({self.dosage})" if self.dosage else self.drug_name
