import datetime
import logging
import uuid
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from core.models import Notification
from inventory import services
from inventory.exceptions import InvalidPurchaseOrder, InsufficientSourceStock
from inventory.models import PurchaseOrder, StockBatch, StockTransfer

pytestmark = pytest.mark.django_db


def test_default_expiry_is_two_years_out():
    assert services.default_expiry(datetime.date(2025, 3, 10)) == datetime.date(2027, 3, 10)
    assert services.default_expiry(datetime.date(2024, 2, 29)) == datetime.date(2026, 2, 28)


def test_deduct_fifo_reports_cost_and_batches(depot, paracetamol, make_batch):
    late = make_batch(depot, paracetamol, quantity=5, unit_cost='20', expiry_in_days=5)
    early = make_batch(depot, paracetamol, quantity=5, unit_cost='10', expiry_in_days=1)

    result = services.deduct_fifo(depot, paracetamol, 7)

    assert result['deducted'] == 7
    assert result['remaining'] == 0
    assert result['total_cost'] == Decimal('90')
    assert [(b.pk, taken) for b, taken in result['batches']] == [(early.pk, 5), (late.pk, 2)]


def test_deduct_fifo_skips_empty_batches(depot, paracetamol, make_batch):
    make_batch(depot, paracetamol, quantity=0, unit_cost='1', expiry_in_days=1)
    make_batch(depot, paracetamol, quantity=4, unit_cost='3', expiry_in_days=9)

    result = services.deduct_fifo(depot, paracetamol, 6)

    assert (result['deducted'], result['remaining']) == (4, 2)
    assert len(result['batches']) == 1


class TestPurchaseOrders:
    def test_numbers_are_sequential_per_year(self, paracetamol):
        year = timezone.localdate().year
        first = services.create_purchase_order([{'name': paracetamol.name, 'qty': 10, 'cost': '200'}])
        second = services.create_purchase_order([{'name': paracetamol.name, 'qty': 10, 'cost': '200'}])

        assert first.po_number.endswith('-001')
        assert second.po_number.endswith('-002')
        assert services.next_po_number(year + 1) == f'PO-{year + 1}-001'

    def test_totals_and_links_medicine(self, paracetamol):
        po = services.create_purchase_order([
            {'name': paracetamol.name, 'qty': 10, 'cost': Decimal('200')},
            {'name': 'Kasa Steril', 'qty': 3, 'cost': Decimal('1500.50')},
        ])

        assert po.status == 'DRAFT'
        assert po.total_cost == Decimal('6501.50')
        lines = {line.item_name: line for line in po.items.all()}
        assert lines[paracetamol.name].medicine == paracetamol
        assert lines['Kasa Steril'].medicine is None

    def test_requires_items(self):
        with pytest.raises(ValidationError):
            services.create_purchase_order([])

    def test_receive_books_new_batches(self, paracetamol, depot):
        po = services.create_purchase_order([{'name': paracetamol.name, 'qty': 25, 'cost': '200'}])

        received, batches = services.receive_goods(po.id, depot.id)

        assert received.status == 'RECEIVED'
        assert received.received_at is not None
        batch = batches[0]
        assert (batch.location, batch.medicine, batch.quantity) == (depot, paracetamol, 25)
        assert batch.batch_no == f'BATCH-{po.po_number}'
        assert batch.expiry_date == services.default_expiry()
        assert po.items.get().received_qty == 25

        # goods receipt only feeds batch stock
        paracetamol.refresh_from_db()
        assert paracetamol.stock == 100

    def test_receive_keeps_lot_details(self, paracetamol, depot):
        expiry = datetime.date(2030, 1, 31)
        po = services.create_purchase_order([
            {'name': paracetamol.name, 'qty': 5, 'cost': '200', 'batch_no': 'LOT-77', 'expiry_date': expiry}
        ])

        _, batches = services.receive_goods(po.id, depot.id)

        assert (batches[0].batch_no, batches[0].expiry_date) == ('LOT-77', expiry)

    def test_cannot_receive_twice(self, paracetamol, depot):
        po = services.create_purchase_order([{'name': paracetamol.name, 'qty': 5, 'cost': '200'}])
        services.receive_goods(po.id, depot.id)

        with pytest.raises(InvalidPurchaseOrder):
            services.receive_goods(po.id, depot.id)
        assert StockBatch.objects.count() == 1

    def test_unknown_po_or_location(self, paracetamol):
        with pytest.raises(InvalidPurchaseOrder):
            services.receive_goods(uuid.uuid4(), uuid.uuid4())

        po = services.create_purchase_order([{'name': paracetamol.name, 'qty': 5, 'cost': '200'}])
        with pytest.raises(ValidationError):
            services.receive_goods(po.id, uuid.uuid4())
        po.refresh_from_db()
        assert po.status == 'DRAFT'


class TestTransfers:
    def test_moves_stock_and_creates_destination_batch(self, warehouse, depot, paracetamol, make_batch):
        source = make_batch(warehouse, paracetamol, quantity=50, unit_cost='200', batch_no='LOT-1')

        transfer = services.transfer_stock(warehouse.id, depot.id, paracetamol.name, 20, user_name='gudang')

        source.refresh_from_db()
        assert source.quantity == 30
        dest = StockBatch.objects.get(location=depot)
        assert (dest.quantity, dest.batch_no, dest.medicine, dest.unit_cost) == (20, 'LOT-1', paracetamol, Decimal('200'))
        assert dest.expiry_date == source.expiry_date

        assert transfer.status == 'COMPLETED'
        assert transfer.requested_by == 'gudang'
        assert transfer.items.get().stock_batch == source

    def test_tops_up_matching_destination_batch(self, warehouse, depot, paracetamol, make_batch):
        make_batch(warehouse, paracetamol, quantity=50, batch_no='LOT-1')

        services.transfer_stock(warehouse.id, depot.id, paracetamol.name, 20)
        services.transfer_stock(warehouse.id, depot.id, paracetamol.name, 10)

        assert StockBatch.objects.get(location=depot).quantity == 30
        assert StockTransfer.objects.count() == 2

    def test_picks_earliest_batch_that_covers_the_quantity(self, warehouse, depot, paracetamol, make_batch):
        small = make_batch(warehouse, paracetamol, quantity=5, expiry_in_days=1, batch_no='SMALL')
        big = make_batch(warehouse, paracetamol, quantity=50, expiry_in_days=90, batch_no='BIG')

        services.transfer_stock(warehouse.id, depot.id, paracetamol.name, 10)

        small.refresh_from_db()
        big.refresh_from_db()
        assert (small.quantity, big.quantity) == (5, 40)

    def test_insufficient_source(self, warehouse, depot, paracetamol, make_batch):
        make_batch(warehouse, paracetamol, quantity=5)

        with pytest.raises(InsufficientSourceStock):
            services.transfer_stock(warehouse.id, depot.id, paracetamol.name, 6)
        assert not StockTransfer.objects.exists()

    def test_same_location_is_rejected(self, warehouse, paracetamol, make_batch):
        make_batch(warehouse, paracetamol, quantity=5)

        with pytest.raises(ValidationError):
            services.transfer_stock(warehouse.id, warehouse.id, paracetamol.name, 1)


class TestLowStockSweep:
    def test_lists_items_at_or_below_threshold(self, depot, warehouse, paracetamol, make_batch):
        make_batch(depot, paracetamol, quantity=4)
        make_batch(depot, paracetamol, quantity=6, expiry_in_days=60)
        make_batch(warehouse, paracetamol, quantity=500)

        rows = list(services.low_stock_items(threshold=10))

        assert rows == [{
            'location_id': depot.id,
            'location__name': depot.name,
            'item_name': paracetamol.name,
            'total_qty': 10,
        }]

    def test_drafts_po_and_alerts_staff(self, depot, paracetamol, make_batch, make_user, publisher, settings):
        pharmacist = make_user('apoteker', role='PHARMACY')
        make_batch(depot, paracetamol, quantity=3, unit_cost='250')

        created = services.run_low_stock_sweep(publisher=publisher)

        po = created[0]
        assert po.auto_generated is True
        assert po.location == depot
        line = po.items.get()
        assert (line.quantity, line.unit_cost, line.medicine) == (settings.LOW_STOCK_REORDER_QTY, Decimal('250'), paracetamol)

        notification = Notification.objects.get(recipient=pharmacist)
        assert notification.type == 'LOW_STOCK'
        assert po.po_number in notification.message

        alert = publisher.payloads('low_stock_alert')[0]
        assert (alert['item_name'], alert['quantity'], alert['po_number']) == (paracetamol.name, 3, po.po_number)

    def test_open_order_suppresses_a_second_draft(self, depot, paracetamol, make_batch, publisher, caplog):
        make_batch(depot, paracetamol, quantity=3)

        with caplog.at_level(logging.WARNING, logger='inventory.services'):
            services.run_low_stock_sweep(publisher=publisher)
        again = services.run_low_stock_sweep(publisher=publisher)

        assert again == []
        assert PurchaseOrder.objects.count() == 1
        assert 'Low stock' in caplog.text

    def test_received_order_no_longer_suppresses(self, depot, paracetamol, make_batch, publisher):
        make_batch(depot, paracetamol, quantity=3)
        first = services.run_low_stock_sweep(publisher=publisher)[0]
        PurchaseOrder.objects.filter(pk=first.pk).update(status='RECEIVED')

        assert len(services.run_low_stock_sweep(publisher=publisher)) == 1


class TestReconciliation:
    def test_reports_ledgers_that_disagree(self, depot, paracetamol, make_medicine, make_batch):
        balanced = make_medicine('Amoxicillin 500mg', stock=30)
        make_batch(depot, balanced, quantity=30)
        make_batch(depot, paracetamol, quantity=60)

        rows = services.stock_discrepancies()

        assert rows == [{
            'medicine_id': paracetamol.id,
            'name': paracetamol.name,
            'legacy_stock': 100,
            'batch_stock': 60,
            'difference': 40,
        }]

    def test_medicine_without_batches(self, depot, paracetamol):
        rows = services.stock_discrepancies()
        assert rows[0]['batch_stock'] == 0

    def test_missing_dispensing_location(self, paracetamol, caplog):
        with caplog.at_level(logging.WARNING, logger='inventory.services'):
            assert services.stock_discrepancies() == []
        assert 'not found' in caplog.text

    def test_link_batches_by_item_name(self, depot, paracetamol, make_batch):
        orphan = make_batch(depot, None, quantity=10, item_name=paracetamol.name)
        make_batch(depot, None, quantity=10, item_name='Unknown Item')

        assert services.link_batches_to_medicines() == 1
        orphan.refresh_from_db()
        assert orphan.medicine == paracetamol
