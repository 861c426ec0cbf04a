import pytest
from django.core.management import call_command

from inventory.models import PurchaseOrder, StockBatch

pytestmark = pytest.mark.django_db


def test_create_and_receive_purchase_order(pharmacy_client, paracetamol, depot):
    response = pharmacy_client.post('/api/inventory/purchase-orders/', {
        'items': [{'name': paracetamol.name, 'qty': 12, 'cost': '150.00'}],
    }, format='json')

    assert response.status_code == 201
    assert response.data['status'] == 'DRAFT'
    assert response.data['total_cost'] == '1800.00'
    po_id = response.data['id']

    response = pharmacy_client.get('/api/inventory/purchase-orders/pending/')
    assert [po['id'] for po in response.data] == [po_id]

    response = pharmacy_client.post(
        f'/api/inventory/purchase-orders/{po_id}/receive/', {'location_id': str(depot.id)}, format='json'
    )
    assert response.status_code == 200
    assert response.data['po']['status'] == 'RECEIVED'
    assert response.data['batches'][0]['quantity'] == 12

    response = pharmacy_client.post(
        f'/api/inventory/purchase-orders/{po_id}/receive/', {'location_id': str(depot.id)}, format='json'
    )
    assert response.status_code == 400
    assert response.data['detail'] == 'Invalid PO or already received'


def test_transfer_endpoint(pharmacy_client, warehouse, depot, paracetamol, make_batch):
    make_batch(warehouse, paracetamol, quantity=30)

    response = pharmacy_client.post('/api/inventory/transfers/', {
        'from_location_id': str(warehouse.id),
        'to_location_id': str(depot.id),
        'item_name': paracetamol.name,
        'quantity': 10,
    }, format='json')

    assert response.status_code == 201
    assert response.data['transfer']['requested_by'] == 'apoteker'
    assert StockBatch.objects.get(location=depot).quantity == 10

    response = pharmacy_client.post('/api/inventory/transfers/', {
        'from_location_id': str(warehouse.id),
        'to_location_id': str(depot.id),
        'item_name': paracetamol.name,
        'quantity': 100,
    }, format='json')
    assert response.status_code == 400


def test_stock_listing_is_fifo_ordered(pharmacy_client, depot, warehouse, paracetamol, make_batch):
    make_batch(depot, paracetamol, quantity=5, expiry_in_days=90, batch_no='LATE')
    make_batch(depot, paracetamol, quantity=5, expiry_in_days=10, batch_no='EARLY')
    make_batch(warehouse, paracetamol, quantity=5, expiry_in_days=1, batch_no='ELSEWHERE')

    response = pharmacy_client.get('/api/inventory/stock/', {'location_id': str(depot.id)})

    assert [b['batch_no'] for b in response.data] == ['EARLY', 'LATE']
    assert response.data[0]['location']['name'] == depot.name


def test_malformed_stock_filters_are_bad_requests(pharmacy_client):
    response = pharmacy_client.get('/api/inventory/stock/', {'location_id': 'gudang'})
    assert response.status_code == 400
    assert 'location_id' in response.data

    response = pharmacy_client.get('/api/inventory/stock/low-stock/', {'location_id': '123'})
    assert response.status_code == 400

    response = pharmacy_client.get('/api/inventory/stock/low-stock/', {'threshold': '-1'})
    assert 'threshold' in response.data


def test_low_stock_threshold_param(pharmacy_client, depot, paracetamol, make_batch):
    make_batch(depot, paracetamol, quantity=40)

    assert pharmacy_client.get('/api/inventory/stock/low-stock/').data == []
    response = pharmacy_client.get('/api/inventory/stock/low-stock/', {'threshold': '50', 'location_id': str(depot.id)})
    assert response.data[0]['quantity'] == 40


def test_low_stock_and_export(pharmacy_client, depot, paracetamol, make_batch):
    make_batch(depot, paracetamol, quantity=4, batch_no='LOT-9')

    response = pharmacy_client.get('/api/inventory/stock/low-stock/')
    assert response.data == [{
        'location_id': depot.id,
        'location': depot.name,
        'item_name': paracetamol.name,
        'quantity': 4,
    }]

    response = pharmacy_client.get('/api/inventory/stock/export/')
    assert response['Content-Type'] == 'text/csv'
    lines = response.content.decode().splitlines()
    assert lines[0] == 'Location,Item,Batch,Expiry,Qty,Unit Cost'
    assert lines[1].startswith(f'{depot.name},{paracetamol.name},LOT-9,')


def test_discrepancies_endpoint(pharmacy_client, depot, paracetamol, make_batch):
    make_batch(depot, paracetamol, quantity=90)

    response = pharmacy_client.get('/api/inventory/discrepancies/')

    assert response.data[0]['difference'] == 10


def test_reception_has_no_inventory_access(staff_client):
    assert staff_client.get('/api/inventory/stock/').status_code == 403


def test_low_stock_sweep_command(depot, paracetamol, make_batch, capsys):
    make_batch(depot, paracetamol, quantity=2)

    call_command('low_stock_sweep')

    out = capsys.readouterr().out
    assert 'Low stock sweep: 1 purchase orders drafted' in out
    assert PurchaseOrder.objects.filter(auto_generated=True).count() == 1


def test_reconcile_stock_command(depot, paracetamol, make_batch, capsys):
    make_batch(depot, None, quantity=100, item_name=paracetamol.name)

    call_command('reconcile_stock', '--link')

    out = capsys.readouterr().out
    assert 'Linked 1 batches to medicines' in out
    assert 'Legacy and batch stock agree.' in out
