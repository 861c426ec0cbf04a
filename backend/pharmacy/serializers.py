from rest_framework import serializers
from queues.models import Doctor
from .models import Medicine, Prescription, PrescriptionItem


class MedicineSerializer(serializers.ModelSerializer):
    batch_stock = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Medicine
        fields = [
            'id', 'name', 'code', 'category', 'unit', 'price',
            'stock', 'batch_stock', 'reorder_level', 'created_at', 'updated_at'
        ]
        read_only_fields = ['stock', 'created_at', 'updated_at']


class PrescriptionItemSerializer(serializers.ModelSerializer):
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)
    unit = serializers.CharField(source='medicine.unit', read_only=True)

    class Meta:
        model = PrescriptionItem
        fields = [
            'id', 'medicine', 'medicine_name', 'unit', 'quantity', 'dosage', 'notes',
            'actual_price', 'dispensed_qty', 'shortfall_qty'
        ]


class PrescriptionSerializer(serializers.ModelSerializer):
    items = PrescriptionItemSerializer(many=True, read_only=True)
    doctor_name = serializers.CharField(source='doctor.name', read_only=True, default=None)

    class Meta:
        model = Prescription
        fields = [
            'id', 'patient_name', 'medical_record_no', 'doctor', 'doctor_name', 'notes',
            'status', 'needs_review', 'completed_at', 'items', 'created_at', 'updated_at'
        ]


class PrescriptionItemInput(serializers.Serializer):
    medicine_id = serializers.PrimaryKeyRelatedField(source='medicine', queryset=Medicine.objects.filter(is_deleted=False))
    quantity = serializers.IntegerField(min_value=1)
    dosage = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class PrescriptionCreateSerializer(serializers.Serializer):
    patient_name = serializers.CharField(max_length=255)
    medical_record_no = serializers.CharField(max_length=50, required=False, allow_blank=True)
    doctor_id = serializers.PrimaryKeyRelatedField(
        source='doctor', queryset=Doctor.objects.filter(is_deleted=False), required=False, allow_null=True
    )
    notes = serializers.CharField(required=False, allow_blank=True)
    items = PrescriptionItemInput(many=True, allow_empty=False)


class PrescriptionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Prescription.STATUS_CHOICES)
