"""Appointments App URLs.

Prefix: /api/
Routes:
	GET/POST              /api/appointments/                          - List (filters) / Create
	GET                   /api/appointments/availability/?date=       - Booked "HH:mm" start times
	GET                   /api/appointments/slots/?date=              - Daily grid with booked flags
	GET                   /api/appointments/upcoming/                 - Next 7 days
	GET                   /api/appointments/today/                    - Today
	GET/PUT/PATCH/DELETE  /api/appointments/<pk>/                     - Retrieve/Update/Delete
	POST                  /api/appointments/<pk>/cancel/              - Cancel
	GET                   /api/appointments/<uuid>/                   - Retrieve by uuid
"""

from django.urls import path

from medpoc_backend.appointments.views import (
	AppointmentAvailabilityView,
	AppointmentByUuidView,
	AppointmentCancelView,
	AppointmentDetailView,
	AppointmentListCreateView,
	AppointmentSlotsView,
	AppointmentTodayView,
	AppointmentUpcomingView,
)

app_name = 'appointments'

urlpatterns = [
	path('appointments/', AppointmentListCreateView.as_view(), name='list'),
	path('appointments/availability/', AppointmentAvailabilityView.as_view(), name='availability'),
	path('appointments/slots/', AppointmentSlotsView.as_view(), name='slots'),
	path('appointments/upcoming/', AppointmentUpcomingView.as_view(), name='upcoming'),
	path('appointments/today/', AppointmentTodayView.as_view(), name='today'),
	path('appointments/<int:pk>/', AppointmentDetailView.as_view(), name='detail'),
	path('appointments/<int:pk>/cancel/', AppointmentCancelView.as_view(), name='cancel'),
	path('appointments/<uuid:appointment_uuid>/', AppointmentByUuidView.as_view(), name='detail_uuid'),
]
