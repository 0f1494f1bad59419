import re

from rest_framework import serializers

from medpoc_backend.patients.models import Patient


class PatientReadSerializer(serializers.ModelSerializer):
    """Read-only serializer with all fields."""

    class Meta:
        model = Patient
        fields = [
            'id',
            'uuid',
            'name',
            'dob',
            'gender',
            'email',
            'phone',
            'address',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PatientWriteSerializer(serializers.ModelSerializer):
    """Write serializer for create/update operations.

    Persistence goes through patients.services, never through save().
    """

    class Meta:
        model = Patient
        fields = [
            'name',
            'dob',
            'gender',
            'email',
            'phone',
            'address',
        ]
        extra_kwargs = {
            'name': {'min_length': 1, 'max_length': 100},
        }

    def to_internal_value(self, data):
        # Forms submit "" for an unset date.
        if hasattr(data, 'get') and data.get('dob') == '':
            data = data.copy()
            data['dob'] = None
        return super().to_internal_value(data)

    def validate_phone(self, value):
        """Strip formatting; a given number must have exactly 10 digits."""
        if not value:
            return ''
        digits = re.sub(r'\D', '', value)
        if len(digits) != 10:
            raise serializers.ValidationError('Phone number must be exactly 10 digits.')
        return digits


class PatientBulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False,
    )
