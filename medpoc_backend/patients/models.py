import uuid

from django.conf import settings
from django.db import models


class Patient(models.Model):
    """Patient record.

    Patients are not owned directly: a doctor sees a patient only through a
    DoctorPatient association row.
    """

    class Gender(models.TextChoices):
        MALE = 'male', 'Male'
        FEMALE = 'female', 'Female'
        OTHER = 'other', 'Other'

    uuid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    name = models.CharField(max_length=100)
    dob = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    # digits only
    phone = models.CharField(max_length=20, blank=True, default='')
    address = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'patients_patient'
        ordering = ['name', 'id']
        verbose_name = 'Patient'
        verbose_name_plural = 'Patients'

    def __str__(self) -> str:
        return f"{self.name} ({self.uuid})"


class DoctorPatient(models.Model):
    """Association between a doctor and a patient they treat."""

    uuid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='patient_links',
    )
    patient = models.ForeignKey(
        Patient,
        on_delete=models.CASCADE,
        related_name='doctor_links',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'patients_doctor_patient'
        constraints = [
            models.UniqueConstraint(fields=['doctor', 'patient'], name='uniq_doctor_patient'),
        ]
        verbose_name = 'Doctor-Patient Link'
        verbose_name_plural = 'Doctor-Patient Links'

    def __str__(self) -> str:
        return f"doctor={self.doctor_id} patient={self.patient_id}"
