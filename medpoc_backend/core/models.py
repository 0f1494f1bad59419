import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class Role(models.Model):
    """User roles chosen during onboarding.

    Standard roles: doctor, assistant, admin
    """

    name = models.CharField(max_length=64, unique=True, db_index=True)
    label = models.CharField(max_length=128)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'core_role'
        ordering = ['name']
        verbose_name = 'Role'
        verbose_name_plural = 'Roles'

    def __str__(self) -> str:
        return self.label


class DocumentType(models.Model):
    """Identity document kinds (passport, national id, ...) for onboarding."""

    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'core_document_type'
        ordering = ['name']
        verbose_name = 'Document Type'
        verbose_name_plural = 'Document Types'

    def __str__(self) -> str:
        return self.name


class User(AbstractUser):
    """Custom User model: the practitioner identity that scopes all data access.

    Extends Django's AbstractUser with:
    - role: ForeignKey to Role, set during onboarding
    - specialty / document fields: onboarding profile
    - email: Made unique (required for JWT auth)

    A user counts as onboarded once a role and a specialty are set.
    """

    uuid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    email = models.EmailField('email address', blank=True, unique=True)
    phone = models.CharField(max_length=20, blank=True, default='')
    role = models.ForeignKey(
        Role,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name='users',
    )
    specialty = models.CharField(max_length=100, blank=True, default='')
    document_type = models.ForeignKey(
        DocumentType,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='users',
    )
    document_number = models.CharField(max_length=50, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'core_user'
        ordering = ['username']
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username

    @property
    def is_onboarded(self) -> bool:
        return bool(self.role_id and self.specialty)
