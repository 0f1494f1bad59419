from rest_framework import serializers

from medpoc_backend.appointments.models import Appointment
from medpoc_backend.appointments.services.availability import format_slot


class AppointmentPatientSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    uuid = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)


class AppointmentReadSerializer(serializers.ModelSerializer):
    """Read-only serializer with patient summary and the local start time."""

    patient = AppointmentPatientSerializer(read_only=True)
    patient_name = serializers.CharField(source='patient.name', read_only=True, default=None)
    doctor_id = serializers.IntegerField(read_only=True)
    time = serializers.SerializerMethodField()

    class Meta:
        model = Appointment
        fields = [
            'id',
            'uuid',
            'doctor_id',
            'patient',
            'patient_name',
            'scheduled_at',
            'time',
            'reason',
            'status',
            'duration',
            'notes',
            'location',
            'priority',
            'confirmed',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_time(self, obj):
        if obj.scheduled_at is None:
            return None
        return format_slot(obj.scheduled_at)


class AppointmentWriteSerializer(serializers.ModelSerializer):
    """Create/update input.

    The start is given either as ``scheduled_at`` or as the form pair
    ``date`` (YYYY-MM-DD) + ``time`` (HH:MM) in the clinic timezone.
    Persistence goes through services.appointments.
    """

    patient_id = serializers.IntegerField(source='patient', min_value=1)
    date = serializers.DateField(required=False, write_only=True)
    time = serializers.TimeField(required=False, write_only=True, input_formats=['%H:%M', '%H:%M:%S'])
    status = serializers.ChoiceField(
        choices=Appointment.Status.choices,
        required=False,
        default=Appointment.Status.PENDING,
    )

    class Meta:
        model = Appointment
        fields = [
            'patient_id',
            'scheduled_at',
            'date',
            'time',
            'reason',
            'status',
            'duration',
            'notes',
            'location',
            'priority',
            'confirmed',
        ]

    def validate(self, attrs):
        has_date = 'date' in attrs
        has_time = 'time' in attrs
        if not self.partial and has_date != has_time:
            raise serializers.ValidationError('date and time must be given together.')
        if not self.partial and not has_date and attrs.get('scheduled_at') is None:
            raise serializers.ValidationError('Either scheduled_at or date and time are required.')
        return attrs
