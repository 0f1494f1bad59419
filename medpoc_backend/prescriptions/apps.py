from django.apps import AppConfig


class PrescriptionsConfig(AppConfig):
    """Standard App-Konfiguration für Prescriptions"""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'medpoc_backend.prescriptions'
    label = 'prescriptions'
    verbose_name = 'Rezepte'
