from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    timestamp = serializers.DateTimeField(source='created_at', read_only=True)
    recipient_name = serializers.CharField(source='recipient.username', read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'recipient', 'recipient_name', 'message', 'is_read', 'type', 'related_id', 'timestamp']
        read_only_fields = ['recipient', 'created_at']
