import datetime
import logging
import uuid
from decimal import Decimal

import pytest
from django.core.management import call_command

from core.models import Notification
from core.notifications import notify_roles
from simrs_cms import events

pytestmark = pytest.mark.django_db


class TestNotifyRoles:
    def test_reaches_active_users_with_role(self, make_user):
        pharmacist = make_user('apoteker', role='PHARMACY')
        make_user('gudang', role='WAREHOUSE', is_active=False)
        make_user('loket', role='RECEPTION')

        created = notify_roles(['PHARMACY', 'WAREHOUSE'], 'Stok menipis', type='LOW_STOCK')

        assert [n.recipient for n in created] == [pharmacist]
        assert Notification.objects.get().type == 'LOW_STOCK'

    def test_unread_duplicate_is_not_resent(self, make_user):
        make_user('apoteker', role='PHARMACY')
        notify_roles(['PHARMACY'], 'Stok menipis')

        assert notify_roles(['PHARMACY'], 'Stok menipis') == []
        Notification.objects.update(is_read=True)
        assert len(notify_roles(['PHARMACY'], 'Stok menipis')) == 1


def test_notification_endpoints(pharmacy_client):
    notify_roles(['PHARMACY'], 'Resep perlu ditinjau')
    notify_roles(['PHARMACY'], 'Stok menipis')

    response = pharmacy_client.get('/api/core/notifications/unread_count/')
    assert response.data == {'unread': 2}

    listing = pharmacy_client.get('/api/core/notifications/')
    first_id = listing.data[0]['id']
    pharmacy_client.post('/api/core/notifications/mark_read/', {'ids': [first_id]}, format='json')

    response = pharmacy_client.get('/api/core/notifications/unread_count/')
    assert response.data == {'unread': 1}


class TestEvents:
    def test_to_wire_makes_payload_json_safe(self):
        ident = uuid.uuid4()
        payload = events.to_wire({'id': ident, 'price': Decimal('12.86'), 'date': datetime.date(2025, 1, 2)})

        assert payload == {'id': str(ident), 'price': '12.86', 'date': '2025-01-02'}

    def test_get_publisher_follows_settings(self, settings):
        settings.SIMRS_EVENT_PUBLISHER = 'simrs_cms.events.RecordingPublisher'
        assert isinstance(events.get_publisher(), events.RecordingPublisher)

    def test_socket_failure_is_logged_not_raised(self, monkeypatch, caplog):
        from simrs_cms.sio import sio

        async def broken_emit(*args, **kwargs):
            raise ConnectionError('socket down')

        monkeypatch.setattr(sio, 'emit', broken_emit)

        with caplog.at_level(logging.ERROR, logger='simrs_cms.events'):
            events.SocketIOPublisher().emit('queue_update', {'ticket': None})

        assert 'Socket emit error (event=queue_update)' in caplog.text


def test_request_logging(staff_client, caplog):
    with caplog.at_level(logging.INFO, logger='simrs_cms.middleware'):
        staff_client.get('/api/counters/')

    assert 'GET /api/counters/ -> 200' in caplog.text


def test_seed_master_data_is_repeatable(capsys, settings):
    from inventory.models import StockBatch
    from inventory.services import stock_discrepancies
    from queues.models import Doctor, Poliklinik

    call_command('seed_master_data')
    call_command('seed_master_data')

    assert Poliklinik.objects.count() == 4
    assert Doctor.objects.filter(schedules__isnull=False).distinct().count() == Doctor.objects.count()
    assert StockBatch.objects.filter(location__name=settings.PHARMACY_DISPENSING_LOCATION).count() == 5
    assert stock_discrepancies() == []
    assert 'Successfully seeded master data.' in capsys.readouterr().out


def test_sync_daily_quotas_command(doctor, capsys):
    from queues.models import DailyQuota, DoctorSchedule
    from queues.services import get_today

    DoctorSchedule.objects.create(doctor=doctor, day=get_today().isoweekday())

    call_command('sync_daily_quotas')

    assert DailyQuota.objects.filter(doctor=doctor, status='OPEN').exists()
    assert 'Quota sync: 1 created, 0 closed' in capsys.readouterr().out


def test_asgi_application_serves_socketio_and_django():
    from simrs_cms import asgi
    from simrs_cms.sio import sio

    assert asgi.application.engineio_server is sio
    assert asgi.application.other_asgi_app is asgi.django_app
