"""MedPoc URL Configuration.

API-Routen:
    /api/auth/           - Authentication (core)
    /api/health/         - Health check (core)
    /api/onboarding/     - Arzt-Profil (core)
    /api/patients/       - Patienten (patients)
    /api/appointments/   - Termine & Verfügbarkeit (appointments)
    /api/prescriptions/  - Rezepte inkl. PDF (prescriptions)
    /api/ocr/            - Laborbefund-Upload (labs)
"""

from django.contrib import admin
from django.http import HttpResponse
from django.urls import include, path


def root(request):
    """Plain-text root endpoint (acts like a simple healthcheck)."""
    return HttpResponse("MedPoc backend is running.")


urlpatterns = [
    path("", root, name="root"),
    path("admin/", admin.site.urls),

    path("api/", include("medpoc_backend.core.urls")),
    path("api/", include("medpoc_backend.patients.urls")),
    path("api/", include("medpoc_backend.appointments.urls")),
    path("api/", include("medpoc_backend.prescriptions.urls")),
    path("api/", include("medpoc_backend.labs.urls")),
]
