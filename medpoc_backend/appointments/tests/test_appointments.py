"""
Tests for the appointment endpoints and the availability calculator.

Test settings run in UTC, so "HH:mm" values equal the UTC wall clock.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from datetime import timezone as dt_timezone
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone

from rest_framework.test import APIClient

from medpoc_backend.appointments.models import Appointment
from medpoc_backend.appointments.services.availability import (
	booked_times_for_date,
	slot_grid,
	slots_for_date,
)
from medpoc_backend.core.context import DoctorContext
from medpoc_backend.core.models import Role, User
from medpoc_backend.patients.models import DoctorPatient, Patient


def _at(day: date, hour: int, minute: int = 0) -> datetime:
	return datetime.combine(day, time(hour, minute), tzinfo=dt_timezone.utc)


class _AppointmentTestBase(TestCase):
	databases = {"default"}

	day = date(2024, 1, 15)

	def setUp(self):
		self.role_doctor, _ = Role.objects.using("default").get_or_create(
			name="doctor",
			defaults={"label": "Doctor"},
		)

		self.doctor = User.objects.db_manager("default").create_user(
			username="doctor_appt_test",
			email="doctor_appt@example.com",
			password="DummyPass123!",
			role=self.role_doctor,
			specialty="General Practice",
		)
		self.other_doctor = User.objects.db_manager("default").create_user(
			username="other_appt_test",
			email="other_appt@example.com",
			password="DummyPass123!",
			role=self.role_doctor,
			specialty="Cardiology",
		)

		self.patient = Patient.objects.using("default").create(name="Max Mustermann")
		DoctorPatient.objects.using("default").create(doctor=self.doctor, patient=self.patient)

		self.foreign_patient = Patient.objects.using("default").create(name="Erika Example")
		DoctorPatient.objects.using("default").create(doctor=self.other_doctor, patient=self.foreign_patient)

		self.ctx = DoctorContext(doctor_id=self.doctor.id, user=self.doctor)

	def _client_for(self, user: User) -> APIClient:
		client = APIClient()
		client.defaults["HTTP_HOST"] = "localhost"
		client.force_authenticate(user=user)
		return client

	def _appointment(self, scheduled_at, status=Appointment.Status.PENDING, doctor=None, patient=None):
		return Appointment.objects.using("default").create(
			doctor=doctor or self.doctor,
			patient=patient or self.patient,
			scheduled_at=scheduled_at,
			status=status,
		)


class AvailabilityServiceTest(_AppointmentTestBase):
	"""booked_times_for_date / slots_for_date without HTTP."""

	def test_cancelled_and_null_status_do_not_occupy(self):
		self._appointment(_at(self.day, 9, 0))
		self._appointment(_at(self.day, 9, 30), status=Appointment.Status.CANCELLED)
		self._appointment(_at(self.day, 10, 0), status=None)
		self._appointment(_at(self.day, 11, 0), status=Appointment.Status.CONFIRMED)

		self.assertEqual(booked_times_for_date(self.ctx, self.day), ["09:00", "11:00"])

	def test_duplicates_are_kept_and_sorted(self):
		self._appointment(_at(self.day, 14, 0))
		self._appointment(_at(self.day, 10, 0))
		self._appointment(_at(self.day, 10, 0), status=Appointment.Status.CONFIRMED)

		self.assertEqual(booked_times_for_date(self.ctx, self.day), ["10:00", "10:00", "14:00"])

	def test_only_own_appointments_and_only_that_day(self):
		self._appointment(_at(self.day, 10, 0), doctor=self.other_doctor, patient=self.foreign_patient)
		self._appointment(_at(self.day + timedelta(days=1), 10, 0))
		self._appointment(_at(self.day, 23, 59))
		self._appointment(None)

		self.assertEqual(booked_times_for_date(self.ctx, self.day), ["23:59"])

	def test_slot_grid(self):
		grid = slot_grid()

		self.assertEqual(len(grid), 37)
		self.assertEqual(grid[0], "09:00")
		self.assertEqual(grid[1], "09:15")
		self.assertEqual(grid[-1], "18:00")

	def test_slot_booked_only_on_exact_start(self):
		self._appointment(_at(self.day, 10, 0))
		self._appointment(_at(self.day, 10, 5))

		slots = {s["time"]: s["booked"] for s in slots_for_date(self.ctx, self.day)}

		self.assertTrue(slots["10:00"])
		self.assertFalse(slots["10:15"])
		self.assertEqual(sum(slots.values()), 1)


class AvailabilityAPITest(_AppointmentTestBase):
	"""GET /api/appointments/availability/ and /slots/"""

	def test_booked_then_cancelled_scenario(self):
		api = self._client_for(self.doctor)

		created = api.post(
			"/api/appointments/",
			{"patient_id": self.patient.id, "date": "2024-01-15", "time": "10:00"},
			format="json",
		)
		self.assertEqual(created.status_code, 201, created.data)
		self.assertEqual(created.data["data"]["time"], "10:00")

		r = api.get("/api/appointments/availability/", {"date": "2024-01-15"})
		self.assertEqual(r.status_code, 200)
		self.assertEqual(r.data, {"success": True, "data": ["10:00"]})

		cancel = api.post(f"/api/appointments/{created.data['data']['id']}/cancel/")
		self.assertEqual(cancel.status_code, 200)
		self.assertEqual(cancel.data["data"]["status"], "cancelled")

		r = api.get("/api/appointments/availability/", {"date": "2024-01-15"})
		self.assertEqual(r.data["data"], [])

	def test_missing_date(self):
		api = self._client_for(self.doctor)

		r = api.get("/api/appointments/availability/")

		self.assertEqual(r.status_code, 400)
		self.assertFalse(r.data["success"])
		self.assertEqual(r.data["error"], "Date is required")

	def test_malformed_date(self):
		api = self._client_for(self.doctor)

		for value in ("15.01.2024", "2024-13-45", "tomorrow"):
			r = api.get("/api/appointments/availability/", {"date": value})
			self.assertEqual(r.status_code, 400, value)

	def test_other_doctor_does_not_see_bookings(self):
		self._appointment(_at(self.day, 10, 0))
		api = self._client_for(self.other_doctor)

		r = api.get("/api/appointments/availability/", {"date": "2024-01-15"})

		self.assertEqual(r.data["data"], [])

	def test_unauthenticated(self):
		client = APIClient()
		client.defaults["HTTP_HOST"] = "localhost"

		r = client.get("/api/appointments/availability/", {"date": "2024-01-15"})

		self.assertEqual(r.status_code, 401)
		self.assertEqual(r.data, {"success": False, "error": "Unauthorized"})

	@patch("medpoc_backend.appointments.views.booked_times_for_date", side_effect=DatabaseError("boom"))
	def test_database_failure_returns_generic_error(self, _booked):
		api = self._client_for(self.doctor)

		r = api.get("/api/appointments/availability/", {"date": "2024-01-15"})

		self.assertEqual(r.status_code, 500)
		self.assertEqual(r.data, {"success": False, "error": "Failed to fetch availability"})

	def test_slots_endpoint(self):
		self._appointment(_at(self.day, 9, 15))
		api = self._client_for(self.doctor)

		r = api.get("/api/appointments/slots/", {"date": "2024-01-15"})

		self.assertEqual(r.status_code, 200)
		self.assertEqual(r.data["date"], "2024-01-15")
		self.assertEqual(len(r.data["data"]), 37)
		self.assertEqual(r.data["data"][1], {"time": "09:15", "booked": True})
		self.assertEqual(r.data["data"][0], {"time": "09:00", "booked": False})


class AppointmentCRUDTest(_AppointmentTestBase):
	"""CRUD, duplicate check and ownership for /api/appointments/"""

	def test_create_with_scheduled_at(self):
		api = self._client_for(self.doctor)

		r = api.post(
			"/api/appointments/",
			{
				"patient_id": self.patient.id,
				"scheduled_at": "2024-01-15T11:30:00Z",
				"reason": "Kontrolle",
				"duration": 30,
			},
			format="json",
		)

		self.assertEqual(r.status_code, 201, r.data)
		data = r.data["data"]
		self.assertEqual(data["status"], "pending")
		self.assertEqual(data["patient"]["id"], self.patient.id)
		self.assertEqual(data["patient_name"], "Max Mustermann")
		self.assertEqual(data["doctor_id"], self.doctor.id)
		self.assertEqual(data["time"], "11:30")

	def test_create_requires_start(self):
		api = self._client_for(self.doctor)

		r = api.post("/api/appointments/", {"patient_id": self.patient.id}, format="json")
		self.assertEqual(r.status_code, 400)

		r = api.post(
			"/api/appointments/",
			{"patient_id": self.patient.id, "date": "2024-01-15"},
			format="json",
		)
		self.assertEqual(r.status_code, 400)

	def test_create_rejects_invalid_status(self):
		api = self._client_for(self.doctor)

		r = api.post(
			"/api/appointments/",
			{"patient_id": self.patient.id, "date": "2024-01-15", "time": "10:00", "status": "done"},
			format="json",
		)

		self.assertEqual(r.status_code, 400)
		self.assertEqual(r.data["error"], "Validation failed")

	def test_duplicate_booking_is_rejected(self):
		existing = self._appointment(_at(self.day, 10, 0))
		api = self._client_for(self.doctor)

		r = api.post(
			"/api/appointments/",
			{"patient_id": self.patient.id, "date": "2024-01-15", "time": "10:00"},
			format="json",
		)

		self.assertEqual(r.status_code, 409)
		self.assertEqual(r.data["error"], "This time slot is already booked.")
		self.assertEqual(r.data["conflicting_id"], existing.id)
		self.assertEqual(Appointment.objects.using("default").count(), 1)

	def test_booking_after_cancel_is_allowed(self):
		self._appointment(_at(self.day, 10, 0), status=Appointment.Status.CANCELLED)
		api = self._client_for(self.doctor)

		r = api.post(
			"/api/appointments/",
			{"patient_id": self.patient.id, "date": "2024-01-15", "time": "10:00"},
			format="json",
		)

		self.assertEqual(r.status_code, 201, r.data)

	def test_booking_over_null_status_row_is_allowed(self):
		self._appointment(_at(self.day, 11, 0), status=None)
		api = self._client_for(self.doctor)

		r = api.get("/api/appointments/availability/", {"date": "2024-01-15"})
		self.assertEqual(r.data["data"], [])

		r = api.post(
			"/api/appointments/",
			{"patient_id": self.patient.id, "date": "2024-01-15", "time": "11:00"},
			format="json",
		)
		self.assertEqual(r.status_code, 201, r.data)

	def test_reactivating_cancelled_into_rebooked_slot_is_rejected(self):
		cancelled = self._appointment(_at(self.day, 10, 0), status=Appointment.Status.CANCELLED)
		self._appointment(_at(self.day, 10, 0))
		api = self._client_for(self.doctor)

		r = api.patch(f"/api/appointments/{cancelled.id}/", {"status": "pending"}, format="json")

		self.assertEqual(r.status_code, 409)
		cancelled.refresh_from_db()
		self.assertEqual(cancelled.status, Appointment.Status.CANCELLED)

	def test_reactivating_cancelled_into_free_slot_is_allowed(self):
		cancelled = self._appointment(_at(self.day, 10, 0), status=Appointment.Status.CANCELLED)
		api = self._client_for(self.doctor)

		r = api.patch(f"/api/appointments/{cancelled.id}/", {"status": "confirmed"}, format="json")

		self.assertEqual(r.status_code, 200, r.data)
		self.assertEqual(r.data["data"]["status"], "confirmed")

	def test_other_doctor_can_book_same_time(self):
		self._appointment(_at(self.day, 10, 0))
		api = self._client_for(self.other_doctor)

		r = api.post(
			"/api/appointments/",
			{"patient_id": self.foreign_patient.id, "date": "2024-01-15", "time": "10:00"},
			format="json",
		)

		self.assertEqual(r.status_code, 201, r.data)

	def test_create_for_unlinked_patient_is_forbidden(self):
		api = self._client_for(self.doctor)

		r = api.post(
			"/api/appointments/",
			{"patient_id": self.foreign_patient.id, "date": "2024-01-15", "time": "10:00"},
			format="json",
		)

		self.assertEqual(r.status_code, 403)
		self.assertEqual(Appointment.objects.using("default").count(), 0)

	def test_list_filters(self):
		a = self._appointment(_at(self.day, 9, 0))
		b = self._appointment(_at(self.day, 10, 0), status=Appointment.Status.CONFIRMED)
		self._appointment(_at(self.day + timedelta(days=1), 9, 0))
		self._appointment(_at(self.day, 9, 0), doctor=self.other_doctor, patient=self.foreign_patient)
		api = self._client_for(self.doctor)

		r = api.get("/api/appointments/", {"date": "2024-01-15"})
		self.assertEqual([x["id"] for x in r.data["data"]], [a.id, b.id])

		r = api.get("/api/appointments/", {"status": "confirmed"})
		self.assertEqual([x["id"] for x in r.data["data"]], [b.id])

		r = api.get("/api/appointments/", {"status": "done"})
		self.assertEqual(r.status_code, 400)

		r = api.get("/api/appointments/", {"patient_id": "abc"})
		self.assertEqual(r.status_code, 400)

	def test_retrieve_ownership(self):
		own = self._appointment(_at(self.day, 9, 0))
		foreign = self._appointment(_at(self.day, 9, 0), doctor=self.other_doctor, patient=self.foreign_patient)
		api = self._client_for(self.doctor)

		self.assertEqual(api.get(f"/api/appointments/{own.id}/").status_code, 200)
		self.assertEqual(api.get(f"/api/appointments/{own.uuid}/").status_code, 200)

		r = api.get(f"/api/appointments/{foreign.id}/")
		self.assertEqual(r.status_code, 403)
		self.assertEqual(r.data["error"], "Access denied")

		r = api.get("/api/appointments/999999/")
		self.assertEqual(r.status_code, 404)
		self.assertEqual(r.data["error"], "Appointment not found")

	def test_patch_time_keeps_date(self):
		appointment = self._appointment(_at(self.day, 9, 0))
		api = self._client_for(self.doctor)

		r = api.patch(f"/api/appointments/{appointment.id}/", {"time": "14:45"}, format="json")

		self.assertEqual(r.status_code, 200, r.data)
		appointment.refresh_from_db()
		self.assertEqual(appointment.scheduled_at, _at(self.day, 14, 45))

	def test_patch_into_booked_slot_is_rejected(self):
		self._appointment(_at(self.day, 11, 0))
		appointment = self._appointment(_at(self.day, 9, 0))
		api = self._client_for(self.doctor)

		r = api.patch(
			f"/api/appointments/{appointment.id}/",
			{"scheduled_at": "2024-01-15T11:00:00Z"},
			format="json",
		)

		self.assertEqual(r.status_code, 409)

	def test_patch_same_start_is_not_a_conflict(self):
		appointment = self._appointment(_at(self.day, 9, 0))
		api = self._client_for(self.doctor)

		r = api.patch(
			f"/api/appointments/{appointment.id}/",
			{"date": "2024-01-15", "time": "09:00", "notes": "Nüchtern erscheinen"},
			format="json",
		)

		self.assertEqual(r.status_code, 200, r.data)
		self.assertEqual(r.data["data"]["notes"], "Nüchtern erscheinen")

	def test_update_foreign_is_forbidden(self):
		foreign = self._appointment(_at(self.day, 9, 0), doctor=self.other_doctor, patient=self.foreign_patient)
		api = self._client_for(self.doctor)

		r = api.patch(f"/api/appointments/{foreign.id}/", {"notes": "x"}, format="json")

		self.assertEqual(r.status_code, 403)

	def test_delete(self):
		appointment = self._appointment(_at(self.day, 9, 0))
		foreign = self._appointment(_at(self.day, 9, 0), doctor=self.other_doctor, patient=self.foreign_patient)
		api = self._client_for(self.doctor)

		self.assertEqual(api.delete(f"/api/appointments/{foreign.id}/").status_code, 403)

		r = api.delete(f"/api/appointments/{appointment.id}/")
		self.assertEqual(r.status_code, 200)
		self.assertEqual(r.data["data"], {"id": appointment.id})
		self.assertFalse(Appointment.objects.using("default").filter(id=appointment.id).exists())

	def test_cancel_foreign_is_forbidden(self):
		foreign = self._appointment(_at(self.day, 9, 0), doctor=self.other_doctor, patient=self.foreign_patient)
		api = self._client_for(self.doctor)

		r = api.post(f"/api/appointments/{foreign.id}/cancel/")

		self.assertEqual(r.status_code, 403)
		foreign.refresh_from_db()
		self.assertEqual(foreign.status, Appointment.Status.PENDING)

	def test_upcoming_and_today(self):
		now = timezone.now()
		soon = self._appointment(now + timedelta(days=1))
		self._appointment(now + timedelta(days=10))
		self._appointment(now - timedelta(days=2))
		today = self._appointment(datetime.combine(timezone.localdate(), time(12, 0), tzinfo=dt_timezone.utc))
		api = self._client_for(self.doctor)

		r = api.get("/api/appointments/upcoming/")
		self.assertIn(soon.id, [x["id"] for x in r.data["data"]])
		self.assertEqual(len([x for x in r.data["data"] if x["id"] != today.id]), 1)

		r = api.get("/api/appointments/today/")
		self.assertEqual([x["id"] for x in r.data["data"]], [today.id])

	def test_patient_appointments(self):
		appointment = self._appointment(_at(self.day, 9, 0))
		api = self._client_for(self.doctor)

		r = api.get(f"/api/patients/{self.patient.uuid}/appointments/")
		self.assertEqual(r.status_code, 200)
		self.assertEqual([x["id"] for x in r.data["data"]], [appointment.id])

		r = api.get(f"/api/patients/{self.foreign_patient.uuid}/appointments/")
		self.assertEqual(r.status_code, 403)
