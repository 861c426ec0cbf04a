import pytest

from queues import services
from queues.models import Counter, DailyQuota
from simrs_cms.events import RecordingPublisher

pytestmark = pytest.mark.django_db


@pytest.fixture
def recorded(monkeypatch):
    publisher = RecordingPublisher()
    monkeypatch.setattr(services, 'get_publisher', lambda: publisher)
    return publisher


def test_kiosk_takes_ticket_without_login(api_client, doctor, open_quota, recorded):
    response = api_client.post('/api/queue/ticket/', {'doctor_id': str(doctor.id)}, format='json')

    assert response.status_code == 201
    assert response.data['ticket']['queue_code'] == 'A-001'
    assert response.data['quota']['current_count'] == 1
    assert response.data['doctor']['poliklinik']['queue_code'] == 'A'
    assert 'queue_update' in recorded.names()


def test_full_quota_is_a_bad_request(api_client, doctor, make_quota):
    make_quota(doctor, max_quota=1)
    api_client.post('/api/queue/ticket/', {'doctor_id': str(doctor.id)}, format='json')

    response = api_client.post('/api/queue/ticket/', {'doctor_id': str(doctor.id)}, format='json')

    assert response.status_code == 400
    assert response.data['detail'] == 'Quota full'


def test_take_ticket_validates_payload(api_client):
    response = api_client.post('/api/queue/ticket/', {'doctor_id': 'not-a-uuid'}, format='json')
    assert response.status_code == 400
    assert 'doctor_id' in response.data


def test_counter_flow(staff_client, doctor, open_quota, recorded):
    ticket = services.take_ticket(doctor.id)['ticket']

    response = staff_client.post('/api/queues/call/', {'counter_name': 'Loket 1'}, format='json')
    assert response.status_code == 200
    assert response.data['ticket']['id'] == str(ticket.id)
    assert response.data['poliklinik']['name'] == 'Poli Umum'

    response = staff_client.post('/api/queues/skip/', {'ticket_id': str(ticket.id)}, format='json')
    assert response.data['status'] == 'SKIPPED'

    response = staff_client.get('/api/queues/skipped/')
    assert [t['id'] for t in response.data] == [str(ticket.id)]

    response = staff_client.post(
        '/api/queues/recall-skipped/', {'ticket_id': str(ticket.id), 'counter_name': 'Loket 2'}, format='json'
    )
    assert response.data['status'] == 'CALLED'
    assert response.data['counter_name'] == 'Loket 2'

    response = staff_client.post('/api/queues/complete/', {'ticket_id': str(ticket.id)}, format='json')
    assert response.data['status'] == 'SERVED'


def test_call_on_empty_queue_is_404(staff_client):
    response = staff_client.post('/api/queues/call/', {'counter_name': 'Loket 1'}, format='json')

    assert response.status_code == 404
    assert response.data['detail'] == 'No more patients in queue'


def test_counter_actions_need_login(api_client):
    response = api_client.post('/api/queues/call/', {'counter_name': 'Loket 1'}, format='json')
    assert response.status_code in (401, 403)


def test_waiting_list_is_public_and_filterable(api_client, doctor, open_quota, make_doctor, poli_anak, make_quota):
    pediatrician = make_doctor(poli_anak, name='dr. Budi')
    make_quota(pediatrician)
    services.take_ticket(doctor.id)
    services.take_ticket(pediatrician.id)

    response = api_client.get('/api/queues/waiting/')
    assert len(response.data) == 2

    response = api_client.get('/api/queues/waiting/', {'poli_id': str(poli_anak.id)})
    assert [t['queue_code'] for t in response.data] == ['B-001']

    response = api_client.get('/api/queues/waiting/', {'poli_id': ''})
    assert len(response.data) == 2


def test_malformed_poli_id_is_a_bad_request(api_client, staff_client):
    response = api_client.get('/api/queues/waiting/', {'poli_id': 'not-a-uuid'})
    assert response.status_code == 400
    assert 'poli_id' in response.data

    assert staff_client.get('/api/queues/skipped/', {'poli_id': 'abc'}).status_code == 400
    assert api_client.get('/api/doctors/', {'poli_id': 'abc'}).status_code == 400


def test_toggle_quota(staff_client, doctor):
    response = staff_client.post(
        '/api/quota/toggle/', {'doctor_id': str(doctor.id), 'status': 'OPEN', 'max_quota': 15}, format='json'
    )

    assert response.status_code == 200
    assert response.data['max_quota'] == 15
    assert DailyQuota.objects.get(doctor=doctor).status == 'OPEN'


def test_generate_quotas_is_admin_only(staff_client, admin_client_api, doctor):
    assert staff_client.post('/api/quota/generate/').status_code == 403

    response = admin_client_api.post('/api/quota/generate/')
    assert response.data['count'] == 1


def test_doctor_listing_shows_quota(api_client, doctor, open_quota):
    response = api_client.get('/api/doctors/')

    assert response.status_code == 200
    assert response.data[0]['quota']['remaining'] == 30
    assert response.data[0]['poliklinik']['name'] == 'Poli Umum'


def test_counters_and_polies(staff_client, poli_umum):
    response = staff_client.post('/api/counters/', {'name': 'Loket 1'}, format='json')
    assert response.status_code == 201
    assert Counter.objects.filter(name='Loket 1').exists()

    response = staff_client.get('/api/polies/')
    assert [p['queue_code'] for p in response.data] == ['A']
