"""Prescriptions app views.

All endpoints resolve the DoctorContext and delegate to prescriptions.services.
"""

from django.http import HttpResponse
from rest_framework import generics, status

from medpoc_backend.core.exceptions import InvalidPracticeData
from medpoc_backend.core.permissions import DoctorContextMixin
from medpoc_backend.core.utils import log_patient_action, success_response
from medpoc_backend.prescriptions import services
from medpoc_backend.prescriptions.serializers import (
    PrescriptionItemSerializer,
    PrescriptionReadSerializer,
    PrescriptionWriteSerializer,
)


class PrescriptionListCreateView(DoctorContextMixin, generics.GenericAPIView):
    """List (?patient_id=) or create prescriptions with their items."""

    failure_message = 'Failed to fetch prescriptions'

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return PrescriptionWriteSerializer
        return PrescriptionReadSerializer

    def get(self, request, *args, **kwargs):
        patient_id = request.query_params.get('patient_id')
        if patient_id:
            try:
                patient_id = int(patient_id)
            except ValueError as exc:
                raise InvalidPracticeData('patient_id must be an integer', field='patient_id') from exc
        else:
            patient_id = None

        prescriptions = services.list_prescriptions(self.get_doctor_context(), patient_id=patient_id)
        return success_response(PrescriptionReadSerializer(prescriptions, many=True).data)

    def post(self, request, *args, **kwargs):
        serializer = PrescriptionWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data, items = serializer.split()

        prescription = services.create_prescription(self.get_doctor_context(), data, items or [])
        log_patient_action(request.user, 'prescription_create', prescription.patient_id)
        return success_response(
            PrescriptionReadSerializer(prescription).data,
            status=status.HTTP_201_CREATED,
        )


class PrescriptionDetailView(DoctorContextMixin, generics.GenericAPIView):
    """Retrieve, update (items replaced as a batch) or delete a prescription."""

    failure_message = 'Failed to process prescription'

    def get_serializer_class(self):
        if self.request.method in ('PUT', 'PATCH'):
            return PrescriptionWriteSerializer
        return PrescriptionReadSerializer

    def get(self, request, pk, *args, **kwargs):
        prescription = services.get_prescription(self.get_doctor_context(), pk)
        log_patient_action(request.user, 'prescription_view', prescription.patient_id)
        return success_response(PrescriptionReadSerializer(prescription).data)

    def _update(self, request, pk, partial):
        serializer = PrescriptionWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        data, items = serializer.split()

        prescription = services.update_prescription(self.get_doctor_context(), pk, data, items)
        log_patient_action(request.user, 'prescription_update', prescription.patient_id)
        return success_response(PrescriptionReadSerializer(prescription).data)

    def put(self, request, pk, *args, **kwargs):
        return self._update(request, pk, partial=False)

    def patch(self, request, pk, *args, **kwargs):
        return self._update(request, pk, partial=True)

    def delete(self, request, pk, *args, **kwargs):
        prescription = services.delete_prescription(self.get_doctor_context(), pk)
        log_patient_action(request.user, 'prescription_delete', prescription.patient_id)
        return success_response({'id': pk})


class PrescriptionItemsView(DoctorContextMixin, generics.GenericAPIView):
    """GET /api/prescriptions/<pk>/items/"""

    serializer_class = PrescriptionItemSerializer
    failure_message = 'Failed to fetch prescription items'

    def get(self, request, pk, *args, **kwargs):
        items = services.prescription_items(self.get_doctor_context(), pk)
        return success_response(PrescriptionItemSerializer(items, many=True).data)


class PrescriptionPdfView(DoctorContextMixin, generics.GenericAPIView):
    """GET /api/prescriptions/<pk>/pdf/ -> application/pdf attachment"""

    failure_message = 'Failed to generate prescription PDF'

    def get(self, request, pk, *args, **kwargs):
        prescription, content = services.render_prescription_pdf(self.get_doctor_context(), pk)
        log_patient_action(request.user, 'prescription_pdf', prescription.patient_id, meta={'prescription_id': pk})

        response = HttpResponse(content, content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="prescription-{pk}.pdf"'
        response['Content-Length'] = str(len(content))
        return response
