import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

	initial = True

	dependencies = [
		migrations.swappable_dependency(settings.AUTH_USER_MODEL),
		("patients", "0001_initial"),
	]

	operations = [
		migrations.CreateModel(
			name="Appointment",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
				("scheduled_at", models.DateTimeField(blank=True, db_index=True, null=True)),
				("reason", models.TextField(blank=True, default="")),
				(
					"status",
					models.CharField(
						blank=True,
						choices=[("confirmed", "Confirmed"), ("pending", "Pending"), ("cancelled", "Cancelled")],
						default="pending",
						max_length=20,
						null=True,
					),
				),
				("duration", models.PositiveIntegerField(blank=True, null=True)),
				("notes", models.TextField(blank=True, default="")),
				("location", models.CharField(blank=True, default="", max_length=255)),
				(
					"priority",
					models.CharField(
						blank=True,
						choices=[("low", "Low"), ("normal", "Normal"), ("high", "High"), ("urgent", "Urgent")],
						default="",
						max_length=20,
					),
				),
				("confirmed", models.BooleanField(default=False)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
				(
					"doctor",
					models.ForeignKey(
						on_delete=django.db.models.deletion.CASCADE,
						related_name="appointments",
						to=settings.AUTH_USER_MODEL,
					),
				),
				(
					"patient",
					models.ForeignKey(
						on_delete=django.db.models.deletion.CASCADE,
						related_name="appointments",
						to="patients.patient",
					),
				),
			],
			options={
				"db_table": "appointments_appointment",
				"ordering": ["scheduled_at", "id"],
				"indexes": [
					models.Index(fields=["doctor", "scheduled_at"], name="appt_doctor_sched_idx"),
				],
			},
		),
	]
