"""Tests for onboarding and reference data endpoints.

- GET  /api/user-setup/
- POST /api/onboarding/
- GET  /api/roles/, /api/document-types/
- DoctorContext resolution for practice endpoints
"""

from __future__ import annotations

from unittest.mock import patch

from django.test import TestCase

from rest_framework import status
from rest_framework.exceptions import NotAuthenticated
from rest_framework.test import APIClient

from medpoc_backend.core.context import DoctorContext, resolve_doctor_context
from medpoc_backend.core.exceptions import OnboardingRequired
from medpoc_backend.core.models import DocumentType, Role, User
from medpoc_backend.core.seeders import seed_core


class OnboardingTest(TestCase):
    databases = {"default"}

    def setUp(self):
        seed_core()
        self.role_doctor = Role.objects.using("default").get(name="doctor")
        self.passport = DocumentType.objects.using("default").get(name="Passport")

        self.fresh_user = User.objects.db_manager("default").create_user(
            username="fresh_user",
            email="fresh@example.com",
            password="SecurePass123!",
        )

    def _client_for(self, user):
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        client.force_authenticate(user=user)
        return client

    def _payload(self, **overrides):
        payload = {
            "name": "Ana Garcia",
            "phone": "+15551234567",
            "role": self.role_doctor.id,
            "specialty": "Pediatrics",
            "document_type": self.passport.id,
            "document_number": "AB-123 456",
        }
        payload.update(overrides)
        return payload

    def test_user_setup_reports_needs_onboarding(self):
        api = self._client_for(self.fresh_user)

        r = api.get("/api/user-setup/")

        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data, {"success": True, "needsOnboarding": True})

    def test_user_setup_requires_authentication(self):
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"

        r = client.get("/api/user-setup/")

        self.assertEqual(r.status_code, status.HTTP_401_UNAUTHORIZED)

    @patch("medpoc_backend.core.views.log_patient_action")
    def test_onboarding_completes_profile(self, log_mock):
        api = self._client_for(self.fresh_user)

        r = api.post("/api/onboarding/", self._payload(), format="json")

        self.assertEqual(r.status_code, 200, r.data)
        self.fresh_user.refresh_from_db()
        self.assertEqual(self.fresh_user.first_name, "Ana")
        self.assertEqual(self.fresh_user.last_name, "Garcia")
        self.assertEqual(self.fresh_user.role_id, self.role_doctor.id)
        self.assertEqual(self.fresh_user.document_type_id, self.passport.id)
        self.assertTrue(self.fresh_user.is_onboarded)
        self.assertFalse(r.data["data"]["needs_onboarding"])
        log_mock.assert_called_once()

        r2 = api.get("/api/user-setup/")
        self.assertFalse(r2.data["needsOnboarding"])

    def test_onboarding_rejects_invalid_fields(self):
        api = self._client_for(self.fresh_user)

        r = api.post(
            "/api/onboarding/",
            self._payload(name="A1", phone="0123", document_number="!!"),
            format="json",
        )

        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["error"], "Validation failed")
        joined = " ".join(r.data["details"])
        self.assertIn("name:", joined)
        self.assertIn("phone:", joined)
        self.assertIn("document_number:", joined)
        self.fresh_user.refresh_from_db()
        self.assertFalse(self.fresh_user.is_onboarded)

    def test_onboarding_phone_is_optional(self):
        api = self._client_for(self.fresh_user)

        r = api.post("/api/onboarding/", self._payload(phone=""), format="json")

        self.assertEqual(r.status_code, 200, r.data)
        self.fresh_user.refresh_from_db()
        self.assertEqual(self.fresh_user.phone, "")

    def test_reference_lists(self):
        api = self._client_for(self.fresh_user)

        roles = api.get("/api/roles/")
        doc_types = api.get("/api/document-types/")

        self.assertEqual(roles.status_code, 200)
        self.assertEqual(
            sorted(r["name"] for r in roles.data["data"]),
            ["admin", "assistant", "doctor"],
        )
        self.assertEqual(doc_types.status_code, 200)
        self.assertIn("Passport", [d["name"] for d in doc_types.data["data"]])

    def test_practice_endpoint_requires_onboarding(self):
        api = self._client_for(self.fresh_user)

        r = api.get("/api/patients/")

        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(r.data["error"], "Onboarding required")
        self.assertTrue(r.data["needsOnboarding"])


class DoctorContextTest(TestCase):
    databases = {"default"}

    def test_resolve_for_onboarded_user(self):
        role, _ = Role.objects.using("default").get_or_create(name="doctor", defaults={"label": "Doctor"})
        user = User.objects.db_manager("default").create_user(
            username="ctx_doc",
            email="ctx_doc@example.com",
            password="x",
            role=role,
            specialty="General",
        )

        ctx = resolve_doctor_context(user)

        self.assertEqual(ctx, DoctorContext(doctor_id=user.id, user=user))
        self.assertTrue(ctx.owns(type("Row", (), {"doctor_id": user.id})()))
        self.assertFalse(ctx.owns(type("Row", (), {"doctor_id": user.id + 1})()))

    def test_resolve_rejects_anonymous_and_incomplete_profiles(self):
        from django.contrib.auth.models import AnonymousUser

        with self.assertRaises(NotAuthenticated):
            resolve_doctor_context(AnonymousUser())
        with self.assertRaises(NotAuthenticated):
            resolve_doctor_context(None)

        user = User.objects.db_manager("default").create_user(
            username="ctx_fresh", email="ctx_fresh@example.com", password="x"
        )
        with self.assertRaises(OnboardingRequired):
            resolve_doctor_context(user)
