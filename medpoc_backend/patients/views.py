"""Patients app views.

All endpoints resolve the DoctorContext and delegate to patients.services;
domain exceptions are translated by core.exceptions.practice_exception_handler.
"""

from rest_framework import generics, status

from medpoc_backend.appointments.serializers import AppointmentReadSerializer
from medpoc_backend.core.permissions import DoctorContextMixin
from medpoc_backend.core.utils import log_patient_action, success_response
from medpoc_backend.patients import services
from medpoc_backend.patients.serializers import (
    PatientBulkDeleteSerializer,
    PatientReadSerializer,
    PatientWriteSerializer,
)


class PatientListCreateView(DoctorContextMixin, generics.GenericAPIView):
    """List the doctor's patients or create a new patient."""

    failure_message = 'Failed to fetch patients'

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return PatientWriteSerializer
        return PatientReadSerializer

    def get(self, request, *args, **kwargs):
        ctx = self.get_doctor_context()
        patients = services.list_patients(ctx, search=request.query_params.get('search'))
        return success_response(PatientReadSerializer(patients, many=True).data)

    def post(self, request, *args, **kwargs):
        ctx = self.get_doctor_context()
        serializer = PatientWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        patient = services.create_patient(ctx, serializer.validated_data)
        log_patient_action(request.user, 'patient_created', patient_id=patient.id)
        return success_response(PatientReadSerializer(patient).data, status=status.HTTP_201_CREATED)


class PatientDetailView(DoctorContextMixin, generics.GenericAPIView):
    """Retrieve, update or delete one of the doctor's patients."""

    failure_message = 'Failed to process patient'

    def get_serializer_class(self):
        if self.request.method in ('PUT', 'PATCH'):
            return PatientWriteSerializer
        return PatientReadSerializer

    def get(self, request, pk, *args, **kwargs):
        patient = services.get_patient(self.get_doctor_context(), pk)
        log_patient_action(request.user, 'patient_viewed', patient_id=patient.id)
        return success_response(PatientReadSerializer(patient).data)

    def _update(self, request, pk, partial):
        ctx = self.get_doctor_context()
        patient = services.get_patient(ctx, pk)
        serializer = PatientWriteSerializer(patient, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        patient = services.update_patient(ctx, pk, serializer.validated_data)
        log_patient_action(request.user, 'patient_updated', patient_id=patient.id)
        return success_response(PatientReadSerializer(patient).data)

    def put(self, request, pk, *args, **kwargs):
        return self._update(request, pk, partial=False)

    def patch(self, request, pk, *args, **kwargs):
        return self._update(request, pk, partial=True)

    def delete(self, request, pk, *args, **kwargs):
        removed = services.delete_patient(self.get_doctor_context(), pk)
        log_patient_action(request.user, 'patient_deleted', patient_id=pk, meta={'row_deleted': removed})
        return success_response({'id': pk})


class PatientByUuidView(DoctorContextMixin, generics.GenericAPIView):
    """GET /api/patients/<uuid>/"""

    serializer_class = PatientReadSerializer
    failure_message = 'Failed to fetch patient'

    def get(self, request, patient_uuid, *args, **kwargs):
        patient = services.get_patient_by_uuid(self.get_doctor_context(), patient_uuid)
        log_patient_action(request.user, 'patient_viewed', patient_id=patient.id)
        return success_response(PatientReadSerializer(patient).data)


class PatientAppointmentsView(DoctorContextMixin, generics.GenericAPIView):
    """GET /api/patients/<uuid>/appointments/"""

    serializer_class = AppointmentReadSerializer
    failure_message = 'Failed to fetch appointments'

    def get(self, request, patient_uuid, *args, **kwargs):
        appointments = services.patient_appointments(self.get_doctor_context(), patient_uuid)
        return success_response(AppointmentReadSerializer(appointments, many=True).data)


class PatientBulkDeleteView(DoctorContextMixin, generics.GenericAPIView):
    """POST /api/patients/bulk-delete/ with {"ids": [...]}"""

    serializer_class = PatientBulkDeleteSerializer
    failure_message = 'Failed to delete patients'

    def post(self, request, *args, **kwargs):
        serializer = PatientBulkDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ids = serializer.validated_data['ids']

        deleted = services.delete_patients(self.get_doctor_context(), ids)
        log_patient_action(request.user, 'patients_bulk_deleted', meta={'ids': ids})
        return success_response({'deleted': deleted})
