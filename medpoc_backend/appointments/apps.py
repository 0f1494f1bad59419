"""
Appointments App Configuration
"""

from django.apps import AppConfig


class AppointmentsConfig(AppConfig):
	"""Standard App-Konfiguration für Appointments"""
	default_auto_field = 'django.db.models.BigAutoField'
	name = 'medpoc_backend.appointments'
	label = 'appointments'
	verbose_name = 'Termine'
