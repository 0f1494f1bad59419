from rest_framework import serializers

from medpoc_backend.prescriptions.models import Prescription, PrescriptionItem


class PrescriptionItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PrescriptionItem
        fields = [
            'id',
            'uuid',
            'drug_name',
            'dosage',
            'frequency',
            'duration',
            'instructions',
            'created_at',
        ]
        read_only_fields = ['id', 'uuid', 'created_at']


class PrescriptionReadSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source='patient.name', read_only=True)
    items = PrescriptionItemSerializer(many=True, read_only=True)

    class Meta:
        model = Prescription
        fields = [
            'id',
            'uuid',
            'doctor_id',
            'patient_id',
            'patient_name',
            'appointment_id',
            'prescribed_at',
            'notes',
            'items',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PrescriptionWriteSerializer(serializers.ModelSerializer):
    """Create/update input: the prescription and its full item batch.

    On update, omitting ``items`` keeps the stored items; sending a list
    (also an empty one) replaces them.
    """

    patient_id = serializers.IntegerField(source='patient', min_value=1)
    appointment_id = serializers.IntegerField(
        source='appointment',
        min_value=1,
        required=False,
        allow_null=True,
    )
    items = PrescriptionItemSerializer(many=True, required=False)

    class Meta:
        model = Prescription
        fields = [
            'patient_id',
            'appointment_id',
            'prescribed_at',
            'notes',
            'items',
        ]

    def split(self):
        """Return ``(data, items)``; ``items`` is None when not submitted."""
        data = dict(self.validated_data)
        items = data.pop('items', None)
        return data, items
