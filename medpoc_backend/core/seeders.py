from django.db import transaction

from .models import DocumentType, Role


ROLE_DEFINITIONS = [
    ("admin", "Admin"),
    ("assistant", "Assistant"),
    ("doctor", "Doctor"),
]

DOCUMENT_TYPES = [
    "Driver License",
    "National ID",
    "Passport",
]


def seed_core(flush: bool = False) -> dict:
    """
    Seedet die Referenzdaten für das Onboarding:
    - Rollen
    - Dokumenttypen

    Wenn flush=True werden nur Dokumenttypen gelöscht; Rollen sind über
    User.role geschützt (PROTECT) und werden per get_or_create aktualisiert.
    """
    stats: dict[str, int] = {}

    with transaction.atomic():
        if flush:
            DocumentType.objects.all().delete()

        roles = _seed_roles()
        stats["core_roles"] = len(roles)

        document_types = _seed_document_types()
        stats["core_document_types"] = len(document_types)

    return stats


def _seed_roles() -> list[Role]:
    roles: list[Role] = []
    for name, label in ROLE_DEFINITIONS:
        role, _created = Role.objects.get_or_create(name=name, defaults={"label": label})
        roles.append(role)
    return roles


def _seed_document_types() -> list[DocumentType]:
    return [DocumentType.objects.get_or_create(name=name)[0] for name in DOCUMENT_TYPES]
