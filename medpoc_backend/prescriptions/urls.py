"""Prescriptions App URLs.

Prefix: /api/
Routes:
    GET/POST              /api/prescriptions/             - List (?patient_id=) / Create
    GET/PUT/PATCH/DELETE  /api/prescriptions/<pk>/        - Retrieve/Update/Delete
    GET                   /api/prescriptions/<pk>/items/  - Items of a prescription
    GET                   /api/prescriptions/<pk>/pdf/    - PDF download
"""

from django.urls import path

from medpoc_backend.prescriptions.views import (
    PrescriptionDetailView,
    PrescriptionItemsView,
    PrescriptionListCreateView,
    PrescriptionPdfView,
)

app_name = 'prescriptions'

urlpatterns = [
    path('prescriptions/', PrescriptionListCreateView.as_view(), name='list'),
    path('prescriptions/<int:pk>/', PrescriptionDetailView.as_view(), name='detail'),
    path('prescriptions/<int:pk>/items/', PrescriptionItemsView.as_view(), name='items'),
    path('prescriptions/<int:pk>/pdf/', PrescriptionPdfView.as_view(), name='pdf'),
]
