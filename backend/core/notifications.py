from django.contrib.auth import get_user_model

from .models import Notification


def notify_roles(roles, message, type='INFO', related_id=None, dedupe=True):
    """
    Create one Notification per active user holding any of ``roles``.

    With ``dedupe`` an identical unread message is not sent twice, so
    periodic sweeps do not spam the same alert every run.
    """
    if dedupe and Notification.objects.filter(message=message, is_read=False).exists():
        return []

    User = get_user_model()
    recipients = User.objects.filter(role__in=roles, is_active=True)
    notifications = [
        Notification(
            recipient=u,
            message=message,
            type=type,
            related_id=related_id
        ) for u in recipients
    ]
    return Notification.objects.bulk_create(notifications)
