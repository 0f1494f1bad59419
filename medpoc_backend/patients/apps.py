from django.apps import AppConfig


class PatientsConfig(AppConfig):
    """Standard App-Konfiguration für Patients"""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'medpoc_backend.patients'
    label = 'patients'
    verbose_name = 'Patienten'
