"""Appointments app views.

All endpoints resolve the DoctorContext and delegate to the service layer:

- services.availability: booked start times and the daily slot grid
- services.appointments: ownership-scoped CRUD, cancel, duplicate check

Practice exceptions propagate to core.exceptions.practice_exception_handler.
"""

from rest_framework import generics, status

from medpoc_backend.appointments.models import Appointment
from medpoc_backend.appointments.serializers import AppointmentReadSerializer, AppointmentWriteSerializer
from medpoc_backend.appointments.services import appointments as appointment_service
from medpoc_backend.appointments.services.availability import (
	booked_times_for_date,
	parse_day,
	slots_for_date,
)
from medpoc_backend.core.exceptions import InvalidPracticeData
from medpoc_backend.core.permissions import DoctorContextMixin
from medpoc_backend.core.utils import log_patient_action, success_response


def _parse_list_filters(request):
	params = request.query_params
	filters = {}

	if params.get('date'):
		filters['day'] = parse_day(params.get('date'))

	status_value = params.get('status')
	if status_value:
		if status_value not in Appointment.Status.values:
			raise InvalidPracticeData(
				f"Invalid status, expected one of: {', '.join(Appointment.Status.values)}",
				field='status',
			)
		filters['status'] = status_value

	patient_id = params.get('patient_id')
	if patient_id:
		try:
			filters['patient_id'] = int(patient_id)
		except ValueError as exc:
			raise InvalidPracticeData('patient_id must be an integer', field='patient_id') from exc

	return filters


class AppointmentListCreateView(DoctorContextMixin, generics.GenericAPIView):
	"""
	List and create appointments.

	GET filters: ?date=YYYY-MM-DD, ?status=confirmed|pending|cancelled, ?patient_id=<id>
	POST rejects a second non-cancelled booking at the same start (409).
	"""
	failure_message = 'Failed to fetch appointments'

	def get_serializer_class(self):
		if self.request.method == 'POST':
			return AppointmentWriteSerializer
		return AppointmentReadSerializer

	def get(self, request, *args, **kwargs):
		ctx = self.get_doctor_context()
		appointments = appointment_service.list_appointments(ctx, **_parse_list_filters(request))
		log_patient_action(request.user, 'appointment_list')
		return success_response(AppointmentReadSerializer(appointments, many=True).data)

	def post(self, request, *args, **kwargs):
		ctx = self.get_doctor_context()
		serializer = AppointmentWriteSerializer(data=request.data)
		serializer.is_valid(raise_exception=True)

		appointment = appointment_service.create_appointment(ctx, serializer.validated_data)
		log_patient_action(request.user, 'appointment_create', appointment.patient_id)
		return success_response(AppointmentReadSerializer(appointment).data, status=status.HTTP_201_CREATED)


class AppointmentAvailabilityView(DoctorContextMixin, generics.GenericAPIView):
	"""GET /api/appointments/availability/?date=YYYY-MM-DD -> ["HH:mm", ...]"""
	failure_message = 'Failed to fetch availability'

	def get(self, request, *args, **kwargs):
		ctx = self.get_doctor_context()
		day = parse_day(request.query_params.get('date'))
		return success_response(booked_times_for_date(ctx, day))


class AppointmentSlotsView(DoctorContextMixin, generics.GenericAPIView):
	"""GET /api/appointments/slots/?date=YYYY-MM-DD -> [{"time", "booked"}, ...]"""
	failure_message = 'Failed to fetch availability'

	def get(self, request, *args, **kwargs):
		ctx = self.get_doctor_context()
		day = parse_day(request.query_params.get('date'))
		return success_response(slots_for_date(ctx, day), date=day.isoformat())


class AppointmentUpcomingView(DoctorContextMixin, generics.GenericAPIView):
	"""GET /api/appointments/upcoming/ (next 7 days)"""
	serializer_class = AppointmentReadSerializer
	failure_message = 'Failed to fetch appointments'

	def get(self, request, *args, **kwargs):
		appointments = appointment_service.upcoming_appointments(self.get_doctor_context())
		return success_response(AppointmentReadSerializer(appointments, many=True).data)


class AppointmentTodayView(DoctorContextMixin, generics.GenericAPIView):
	"""GET /api/appointments/today/"""
	serializer_class = AppointmentReadSerializer
	failure_message = 'Failed to fetch appointments'

	def get(self, request, *args, **kwargs):
		appointments = appointment_service.today_appointments(self.get_doctor_context())
		return success_response(AppointmentReadSerializer(appointments, many=True).data)


class AppointmentDetailView(DoctorContextMixin, generics.GenericAPIView):
	"""Retrieve, update or delete one of the doctor's appointments."""
	failure_message = 'Failed to process appointment'

	def get_serializer_class(self):
		if self.request.method in ('PUT', 'PATCH'):
			return AppointmentWriteSerializer
		return AppointmentReadSerializer

	def get(self, request, pk, *args, **kwargs):
		appointment = appointment_service.get_appointment(self.get_doctor_context(), pk)
		log_patient_action(request.user, 'appointment_view', appointment.patient_id)
		return success_response(AppointmentReadSerializer(appointment).data)

	def _update(self, request, pk, partial):
		ctx = self.get_doctor_context()
		serializer = AppointmentWriteSerializer(data=request.data, partial=partial)
		serializer.is_valid(raise_exception=True)

		appointment = appointment_service.update_appointment(ctx, pk, serializer.validated_data)
		log_patient_action(request.user, 'appointment_update', appointment.patient_id)
		return success_response(AppointmentReadSerializer(appointment).data)

	def put(self, request, pk, *args, **kwargs):
		return self._update(request, pk, partial=False)

	def patch(self, request, pk, *args, **kwargs):
		return self._update(request, pk, partial=True)

	def delete(self, request, pk, *args, **kwargs):
		appointment = appointment_service.delete_appointment(self.get_doctor_context(), pk)
		log_patient_action(request.user, 'appointment_delete', appointment.patient_id)
		return success_response({'id': pk})


class AppointmentCancelView(DoctorContextMixin, generics.GenericAPIView):
	"""POST /api/appointments/<pk>/cancel/"""
	serializer_class = AppointmentReadSerializer
	failure_message = 'Failed to cancel appointment'

	def post(self, request, pk, *args, **kwargs):
		appointment = appointment_service.cancel_appointment(self.get_doctor_context(), pk)
		log_patient_action(request.user, 'appointment_cancel', appointment.patient_id)
		return success_response(AppointmentReadSerializer(appointment).data)


class AppointmentByUuidView(DoctorContextMixin, generics.GenericAPIView):
	"""GET /api/appointments/<uuid>/"""
	serializer_class = AppointmentReadSerializer
	failure_message = 'Failed to fetch appointment'

	def get(self, request, appointment_uuid, *args, **kwargs):
		appointment = appointment_service.get_appointment_by_uuid(self.get_doctor_context(), appointment_uuid)
		log_patient_action(request.user, 'appointment_view', appointment.patient_id)
		return success_response(AppointmentReadSerializer(appointment).data)
