"""
MedPoc Seed Command – erzeugt die Referenzdaten (Rollen, Dokumenttypen).

Verwendung:
    python manage.py seed           # Referenzdaten anlegen / ergänzen
    python manage.py seed --flush   # Dokumenttypen löschen und neu aufbauen
"""

from django.core.management.base import BaseCommand

from medpoc_backend.core.seeders import seed_core


class Command(BaseCommand):
    help = "Seed database with reference data for MedPoc onboarding"

    def add_arguments(self, parser):
        parser.add_argument(
            "--flush",
            action="store_true",
            help="Delete existing document types before seeding.",
        )

    def handle(self, *args, **options):
        flush = options.get("flush", False)

        self.stdout.write("=" * 60)
        self.stdout.write("  MedPoc Seed – Referenzdaten")
        self.stdout.write("=" * 60)

        stats = seed_core(flush=flush)
        for key, value in sorted(stats.items()):
            self.stdout.write(f"  ✓ {key}: {value}")

        self.stdout.write(self.style.SUCCESS("Seeding erfolgreich abgeschlossen."))
