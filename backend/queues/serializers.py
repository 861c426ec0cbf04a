from rest_framework import serializers
from .models import Poliklinik, Doctor, DoctorSchedule, Counter, DailyQuota, Ticket


class PoliklinikSerializer(serializers.ModelSerializer):
    class Meta:
        model = Poliklinik
        fields = ['id', 'name', 'queue_code', 'is_active']


class DoctorScheduleSerializer(serializers.ModelSerializer):
    day_name = serializers.CharField(source='get_day_display', read_only=True)

    class Meta:
        model = DoctorSchedule
        fields = ['id', 'day', 'day_name', 'time_range']


class DoctorSerializer(serializers.ModelSerializer):
    poliklinik = PoliklinikSerializer(read_only=True)

    class Meta:
        model = Doctor
        fields = ['id', 'name', 'specialist', 'poliklinik']


class CounterSerializer(serializers.ModelSerializer):
    class Meta:
        model = Counter
        fields = ['id', 'name', 'created_at']
        read_only_fields = ['id', 'created_at']


class DailyQuotaSerializer(serializers.ModelSerializer):
    doctor = DoctorSerializer(read_only=True)
    remaining = serializers.IntegerField(read_only=True)

    class Meta:
        model = DailyQuota
        fields = ['id', 'doctor', 'date', 'status', 'max_quota', 'current_count', 'remaining', 'updated_at']


class TicketSerializer(serializers.ModelSerializer):
    daily_quota_id = serializers.UUIDField(read_only=True)
    doctor_id = serializers.UUIDField(source='daily_quota.doctor_id', read_only=True)
    doctor_name = serializers.CharField(source='daily_quota.doctor.name', read_only=True)
    poli_id = serializers.UUIDField(source='daily_quota.doctor.poliklinik_id', read_only=True)
    poli_name = serializers.CharField(source='daily_quota.doctor.poliklinik.name', read_only=True)

    class Meta:
        model = Ticket
        fields = [
            'id', 'daily_quota_id', 'doctor_id', 'doctor_name', 'poli_id', 'poli_name',
            'queue_number', 'queue_code', 'status', 'counter_name', 'call_count',
            'called_at', 'finished_at', 'created_at'
        ]


class DoctorAvailabilitySerializer(DoctorSerializer):
    """Doctor with today's quota flattened in, for the kiosk screen."""
    schedules = DoctorScheduleSerializer(many=True, read_only=True)
    quota = serializers.SerializerMethodField()

    class Meta(DoctorSerializer.Meta):
        fields = DoctorSerializer.Meta.fields + ['schedules', 'quota']

    def get_quota(self, obj):
        quotas = getattr(obj, 'today_quotas', None)
        if not quotas:
            return None
        quota = quotas[0]
        return {
            'id': str(quota.id),
            'status': quota.status,
            'max_quota': quota.max_quota,
            'current_count': quota.current_count,
            'remaining': quota.remaining,
        }


# --- Request payloads ---

class TakeTicketSerializer(serializers.Serializer):
    doctor_id = serializers.UUIDField()


class CallNextSerializer(serializers.Serializer):
    counter_name = serializers.CharField(max_length=50)
    poli_id = serializers.UUIDField(required=False, allow_null=True)


class TicketActionSerializer(serializers.Serializer):
    ticket_id = serializers.UUIDField()


class RecallSkippedSerializer(TicketActionSerializer):
    counter_name = serializers.CharField(max_length=50)


class ToggleQuotaSerializer(serializers.Serializer):
    doctor_id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=DailyQuota.STATUS_CHOICES)
    max_quota = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class PoliFilterSerializer(serializers.Serializer):
    poli_id = serializers.UUIDField(required=False, allow_null=True)
