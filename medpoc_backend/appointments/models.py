"""Appointment model.

Technical notes:

- ``status`` is a closed set (confirmed / pending / cancelled) but the column
	stays nullable: imported rows without a status exist and never occupy a slot.
- There is deliberately no unique constraint on (doctor, scheduled_at); the
	duplicate check lives in ``services.appointments.create_appointment``.
"""

import uuid

from django.conf import settings
from django.db import models


class Appointment(models.Model):
	"""A scheduled encounter between a doctor and one of their patients."""

	class Status(models.TextChoices):
		CONFIRMED = 'confirmed', 'Confirmed'
		PENDING = 'pending', 'Pending'
		CANCELLED = 'cancelled', 'Cancelled'

	class Priority(models.TextChoices):
		LOW = 'low', 'Low'
		NORMAL = 'normal', 'Normal'
		HIGH = 'high', 'High'
		URGENT = 'urgent', 'Urgent'

	uuid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
	doctor = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		on_delete=models.CASCADE,
		related_name='appointments',
	)
	patient = models.ForeignKey(
		'patients.Patient',
		on_delete=models.CASCADE,
		related_name='appointments',
	)
	scheduled_at = models.DateTimeField(null=True, blank=True, db_index=True)
	reason = models.TextField(blank=True, default='')
	status = models.CharField(
		max_length=20,
		choices=Status.choices,
		null=True,
		blank=True,
		default=Status.PENDING,
	)
	duration = models.PositiveIntegerField(null=True, blank=True)  # minutes
	notes = models.TextField(blank=True, default='')
	location = models.CharField(max_length=255, blank=True, default='')
	priority = models.CharField(max_length=20, choices=Priority.choices, blank=True, default='')
	confirmed = models.BooleanField(default=False)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		db_table = 'appointments_appointment'
		ordering = ['scheduled_at', 'id']
		indexes = [
			models.Index(fields=['doctor', 'scheduled_at'], name='appt_doctor_sched_idx'),
		]

	def __str__(self) -> str:
		return f"Appointment {self.id} doctor={self.doctor_id} patient={self.patient_id} at {self.scheduled_at}"

	@property
	def occupies_slot(self) -> bool:
		return self.scheduled_at is not None and self.status not in (None, self.Status.CANCELLED)
