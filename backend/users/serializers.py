from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False)
    doctor_id = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name', 'role',
            'is_active', 'date_joined', 'doctor_id', 'password'
        ]
        read_only_fields = ['id', 'date_joined']

    def get_doctor_id(self, obj):
        # Practising doctors are linked to a queues.Doctor for their own queue screen
        doctor = getattr(obj, 'doctor_profile', None)
        return str(doctor.id) if doctor else None
