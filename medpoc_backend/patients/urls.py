"""Patients App URLs.

Prefix: /api/
Routes:
    GET/POST              /api/patients/                    - List/Create
    POST                  /api/patients/bulk-delete/        - Delete several patients
    GET/PUT/PATCH/DELETE  /api/patients/<pk>/               - Retrieve/Update/Delete
    GET                   /api/patients/<uuid>/             - Retrieve by uuid
    GET                   /api/patients/<uuid>/appointments/ - Appointments of a patient
"""

from django.urls import path

from medpoc_backend.patients.views import (
    PatientAppointmentsView,
    PatientBulkDeleteView,
    PatientByUuidView,
    PatientDetailView,
    PatientListCreateView,
)

app_name = 'patients'

urlpatterns = [
    path('patients/', PatientListCreateView.as_view(), name='list'),
    path('patients/bulk-delete/', PatientBulkDeleteView.as_view(), name='bulk_delete'),
    path('patients/<int:pk>/', PatientDetailView.as_view(), name='detail'),
    path('patients/<uuid:patient_uuid>/', PatientByUuidView.as_view(), name='detail_uuid'),
    path(
        'patients/<uuid:patient_uuid>/appointments/',
        PatientAppointmentsView.as_view(),
        name='appointments',
    ),
]
