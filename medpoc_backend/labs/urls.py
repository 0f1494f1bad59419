"""Labs App URLs.

Prefix: /api/
Routes:
    POST /api/ocr/  - Upload a lab report (PDF/PNG/JPEG) and extract results
"""

from django.urls import path

from medpoc_backend.labs.views import LabOcrView

app_name = 'labs'

urlpatterns = [
    path('ocr/', LabOcrView.as_view(), name='ocr'),
]
