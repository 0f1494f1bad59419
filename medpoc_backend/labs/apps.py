from django.apps import AppConfig


class LabsConfig(AppConfig):
    """Standard App-Konfiguration für Labs (Befund-Upload)"""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'medpoc_backend.labs'
    label = 'labs'
    verbose_name = 'Laborbefunde'
