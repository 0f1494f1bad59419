from __future__ import annotations

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, TestCase, override_settings

from rest_framework.test import APIClient

from medpoc_backend.core.models import Role, User
from medpoc_backend.labs.ocr import (
    IMAGE_MOCK_TEXT,
    PDF_MOCK_TEXT,
    classify,
    extract_test_data,
    normalize_lines,
)


class ExtractionTest(SimpleTestCase):
    """Line-based extraction of header fields and result rows."""

    def test_pdf_report(self):
        data = extract_test_data(PDF_MOCK_TEXT)

        self.assertEqual(len(data.results), 15)
        self.assertEqual(data.test_date, "12/15/2024")
        self.assertEqual(data.ordering_physician, "Dr. Smith")
        self.assertEqual(data.lab_name, "City Medical Lab")
        self.assertIsNone(data.test_type)

        glucose = data.results[0]
        self.assertEqual(glucose.parameter, "Glucose")
        self.assertEqual(glucose.value, "95")
        self.assertEqual(glucose.unit, "mg/dL")
        self.assertEqual(glucose.reference_range, "70-100")
        self.assertEqual(glucose.status, "normal")

        by_name = {r.parameter: r for r in data.results}
        self.assertEqual(by_name["LDL"].status, "high")
        self.assertEqual(by_name["Triglycerides"].status, "high")
        self.assertEqual(by_name["HDL"].status, "normal")
        self.assertEqual(by_name["Hematocrit"].unit, "%")
        self.assertEqual(by_name["WBC"].value, "7.2")
        self.assertEqual(by_name["WBC"].unit, "K/uL")

    def test_image_report_with_colons(self):
        data = extract_test_data(IMAGE_MOCK_TEXT)

        self.assertEqual([r.parameter for r in data.results], ["Glucose", "Cholesterol", "HDL", "LDL", "Triglycerides"])
        self.assertEqual(data.test_date, "12/15/2024")

    def test_spanish_labels(self):
        text = """
            Tipo de prueba: Perfil lipídico
            Fecha: 2024-03-01
            Médico: Dra. López
            Laboratorio: Lab Central
            Colesterol 210 mg/dL (<200)
        """

        data = extract_test_data(text)

        self.assertEqual(data.test_type, "Perfil lipídico")
        self.assertEqual(data.test_date, "2024-03-01")
        self.assertEqual(data.ordering_physician, "Dra. López")
        self.assertEqual(data.lab_name, "Lab Central")
        self.assertEqual(len(data.results), 1)
        self.assertEqual(data.results[0].status, "high")

    def test_to_dict_uses_client_keys(self):
        payload = extract_test_data(IMAGE_MOCK_TEXT).to_dict()

        self.assertEqual(set(payload), {"testType", "testDate", "orderingPhysician", "labName", "results"})
        self.assertEqual(
            payload["results"][0],
            {"parameter": "Glucose", "value": "95", "unit": "mg/dL", "referenceRange": "70-100", "status": "normal"},
        )

    def test_empty_text(self):
        self.assertTrue(extract_test_data("").is_empty())
        self.assertTrue(extract_test_data("nothing to see here").is_empty())

    def test_normalize_lines_keeps_line_breaks(self):
        self.assertEqual(normalize_lines("  a   b \n\n  c\td  "), ["a b", "c d"])

    def test_classify(self):
        self.assertEqual(classify("65", "70-100"), "low")
        self.assertEqual(classify("101", "70-100"), "high")
        self.assertEqual(classify("70", "70-100"), "normal")
        self.assertEqual(classify("200", "<200"), "high")
        self.assertEqual(classify("40", ">40"), "low")
        self.assertEqual(classify("41", ">40"), "normal")
        self.assertEqual(classify("5", ""), "normal")
        self.assertEqual(classify("5", "negative"), "normal")


class LabOcrAPITest(TestCase):
    """POST /api/ocr/"""

    databases = {"default"}

    def setUp(self):
        self.role_doctor, _ = Role.objects.using("default").get_or_create(
            name="doctor",
            defaults={"label": "Doctor"},
        )
        self.doctor = User.objects.db_manager("default").create_user(
            username="doctor_lab_test",
            email="doctor_lab@example.com",
            password="DummyPass123!",
            role=self.role_doctor,
            specialty="General Practice",
        )

    def _client_for(self, user: User) -> APIClient:
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        client.force_authenticate(user=user)
        return client

    def _upload(self, content_type="application/pdf", name="report.pdf", content=b"%PDF-1.4 lab"):
        return SimpleUploadedFile(name, content, content_type=content_type)

    def test_pdf_upload(self):
        api = self._client_for(self.doctor)

        r = api.post("/api/ocr/", {"file": self._upload()}, format="multipart")

        self.assertEqual(r.status_code, 200, r.data)
        self.assertTrue(r.data["success"])
        self.assertEqual(r.data["confidence"], 0.85)
        self.assertEqual(len(r.data["data"]["results"]), 15)
        self.assertEqual(r.data["data"]["labName"], "City Medical Lab")
        self.assertIn("LABORATORY REPORT", r.data["rawText"])

    def test_image_upload(self):
        api = self._client_for(self.doctor)

        r = api.post(
            "/api/ocr/",
            {"file": self._upload("image/png", "report.png", b"\x89PNG")},
            format="multipart",
        )

        self.assertEqual(r.status_code, 200, r.data)
        self.assertEqual(len(r.data["data"]["results"]), 5)

    def test_no_file(self):
        api = self._client_for(self.doctor)

        r = api.post("/api/ocr/", {}, format="multipart")

        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["error"], "No file provided")

    def test_unsupported_type(self):
        api = self._client_for(self.doctor)

        r = api.post(
            "/api/ocr/",
            {"file": self._upload("text/plain", "notes.txt", b"Glucose 95")},
            format="multipart",
        )

        self.assertEqual(r.status_code, 422)
        self.assertEqual(r.data["error"], "Unsupported file type. Please upload PDF or image files.")

    @override_settings(LAB_UPLOAD_MAX_BYTES=8)
    def test_file_too_large(self):
        api = self._client_for(self.doctor)

        r = api.post("/api/ocr/", {"file": self._upload()}, format="multipart")

        self.assertEqual(r.status_code, 422)
        self.assertTrue(r.data["error"].startswith("File too large."))

    def test_requires_authentication(self):
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"

        r = client.post("/api/ocr/", {"file": self._upload()}, format="multipart")

        self.assertEqual(r.status_code, 401)
