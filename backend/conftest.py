import datetime
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from simrs_cms.events import RecordingPublisher


@pytest.fixture(autouse=True)
def _silent_broadcasts(settings):
    settings.SIMRS_EVENT_PUBLISHER = 'simrs_cms.events.NullPublisher'


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def make_user(db, django_user_model):
    def _make(username='staff', role='RECEPTION', **extra):
        return django_user_model.objects.create_user(username=username, password='secret123', role=role, **extra)
    return _make


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def staff_client(make_user):
    client = APIClient()
    client.force_authenticate(make_user('loket', role='RECEPTION'))
    return client


@pytest.fixture
def pharmacy_client(make_user):
    client = APIClient()
    client.force_authenticate(make_user('apoteker', role='PHARMACY'))
    return client


@pytest.fixture
def admin_client_api(make_user):
    client = APIClient()
    client.force_authenticate(make_user('admin', role='ADMIN'))
    return client


# --- Queue data ---

@pytest.fixture
def poli_umum(db):
    from queues.models import Poliklinik
    return Poliklinik.objects.create(name='Poli Umum', queue_code='A')


@pytest.fixture
def poli_anak(db):
    from queues.models import Poliklinik
    return Poliklinik.objects.create(name='Poli Anak', queue_code='B')


@pytest.fixture
def make_doctor(db):
    from queues.models import Doctor

    def _make(poliklinik, name='dr. Andi'):
        return Doctor.objects.create(name=name, poliklinik=poliklinik)
    return _make


@pytest.fixture
def doctor(make_doctor, poli_umum):
    return make_doctor(poli_umum)


@pytest.fixture
def make_quota(db, today):
    from queues.models import DailyQuota

    def _make(doctor, max_quota=30, status='OPEN', date=None):
        return DailyQuota.objects.create(doctor=doctor, date=date or today, max_quota=max_quota, status=status)
    return _make


@pytest.fixture
def open_quota(make_quota, doctor):
    return make_quota(doctor)


# --- Pharmacy / inventory data ---

@pytest.fixture
def depot(db, settings):
    from inventory.models import InventoryLocation
    return InventoryLocation.objects.create(name=settings.PHARMACY_DISPENSING_LOCATION, location_type='DEPOT')


@pytest.fixture
def warehouse(db):
    from inventory.models import InventoryLocation
    return InventoryLocation.objects.create(name='Gudang Farmasi Utama', location_type='WAREHOUSE')


@pytest.fixture
def make_medicine(db):
    from pharmacy.models import Medicine

    def _make(name='Paracetamol 500mg', stock=100, price='1000'):
        return Medicine.objects.create(name=name, stock=stock, price=Decimal(price))
    return _make


@pytest.fixture
def paracetamol(make_medicine):
    return make_medicine()


@pytest.fixture
def make_batch(db, today):
    from inventory.models import StockBatch

    def _make(location, medicine=None, quantity=10, unit_cost='0', expiry_in_days=30, batch_no=None, item_name=None):
        return StockBatch.objects.create(
            location=location,
            medicine=medicine,
            item_name=item_name or medicine.name,
            batch_no=batch_no or f"B-{expiry_in_days}",
            expiry_date=today + datetime.timedelta(days=expiry_in_days),
            quantity=quantity,
            unit_cost=Decimal(unit_cost),
        )
    return _make
