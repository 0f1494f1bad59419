"""Serializers for the core app.

Contains serializers for authentication, the current user, the onboarding
form and the reference lists (roles, document types).
"""

import re

from django.contrib.auth import authenticate
from rest_framework import serializers

from medpoc_backend.core.models import DocumentType, Role, User


NAME_RE = re.compile(r'^[a-zA-Z\s]+$')
PHONE_RE = re.compile(r'^\+?[1-9]\d{0,15}$')
DOCUMENT_NUMBER_RE = re.compile(r'^[a-zA-Z0-9\-\s]+$')


# -----------------------------------------------------------------------------
# Reference data
# -----------------------------------------------------------------------------


class RoleSerializer(serializers.ModelSerializer):
    """Read-only serializer for Role model."""

    class Meta:
        model = Role
        fields = ['id', 'name', 'label']
        read_only_fields = fields


class DocumentTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = DocumentType
        fields = ['id', 'name']
        read_only_fields = fields


# -----------------------------------------------------------------------------
# Authentication
# -----------------------------------------------------------------------------


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get('request'),
            username=attrs.get('username'),
            password=attrs.get('password'),
        )
        if user is None or not user.is_active:
            raise serializers.ValidationError('Invalid credentials.')
        attrs['user'] = user
        return attrs


class RefreshSerializer(serializers.Serializer):
    refresh = serializers.CharField()


class UserMeSerializer(serializers.ModelSerializer):
    """Read-only serializer for the authenticated user."""

    role = RoleSerializer(read_only=True)
    document_type = DocumentTypeSerializer(read_only=True)
    name = serializers.CharField(source='display_name', read_only=True)
    needs_onboarding = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'uuid',
            'username',
            'email',
            'first_name',
            'last_name',
            'name',
            'phone',
            'role',
            'specialty',
            'document_type',
            'document_number',
            'needs_onboarding',
        ]
        read_only_fields = fields

    def get_needs_onboarding(self, obj) -> bool:
        return not obj.is_onboarded


# -----------------------------------------------------------------------------
# Onboarding
# -----------------------------------------------------------------------------


class OnboardingSerializer(serializers.Serializer):
    """Doctor profile form submitted once after the first login."""

    name = serializers.CharField(min_length=2, max_length=100)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20)
    role = serializers.PrimaryKeyRelatedField(queryset=Role.objects.using('default').all())
    specialty = serializers.CharField(max_length=100)
    document_type = serializers.PrimaryKeyRelatedField(
        queryset=DocumentType.objects.using('default').all()
    )
    document_number = serializers.CharField(min_length=3, max_length=50)

    def validate_name(self, value):
        if not NAME_RE.match(value):
            raise serializers.ValidationError('Name can only contain letters and spaces.')
        return value.strip()

    def validate_phone(self, value):
        if value and not PHONE_RE.match(value):
            raise serializers.ValidationError('Please enter a valid phone number.')
        return value

    def validate_document_number(self, value):
        if not DOCUMENT_NUMBER_RE.match(value):
            raise serializers.ValidationError(
                'Document number can only contain letters, numbers, hyphens, and spaces.'
            )
        return value

    def update(self, instance, validated_data):
        first_name, _, last_name = validated_data['name'].partition(' ')
        instance.first_name = first_name
        instance.last_name = last_name.strip()
        instance.phone = validated_data.get('phone') or ''
        instance.role = validated_data['role']
        instance.specialty = validated_data['specialty']
        instance.document_type = validated_data['document_type']
        instance.document_number = validated_data['document_number']
        instance.save(
            update_fields=[
                'first_name',
                'last_name',
                'phone',
                'role',
                'specialty',
                'document_type',
                'document_number',
                'updated_at',
            ]
        )
        return instance
