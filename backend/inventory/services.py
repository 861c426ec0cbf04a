"""
Batch-level stock: goods receipt, transfers, FIFO-by-expiry consumption
and the periodic low-stock sweep.

Two stock ledgers exist side by side:

* batch stock, the sum of StockBatch.quantity per location (authoritative), and
* the legacy aggregate ``Medicine.stock`` counter kept for older screens.

They are expected to agree at the dispensing location. Nothing here corrects
one from the other; ``stock_discrepancies`` reports where they differ.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from core.notifications import notify_roles
from simrs_cms.events import get_publisher
from .exceptions import InvalidPurchaseOrder, InsufficientSourceStock
from .models import InventoryLocation, StockBatch, PurchaseOrder, PurchaseOrderItem, StockTransfer, StockTransferItem

logger = logging.getLogger(__name__)

OPEN_PO_STATUSES = ['DRAFT', 'ORDERED']


def get_dispensing_location():
    return InventoryLocation.objects.filter(name=settings.PHARMACY_DISPENSING_LOCATION).first()


def default_expiry(today=None):
    """Two years out, for receipts that carry no expiry date."""
    today = today or timezone.localdate()
    try:
        return today.replace(year=today.year + 2)
    except ValueError:
        # 29 February
        return today.replace(year=today.year + 2, day=28)


def deduct_fifo(location, medicine, quantity):
    """
    Consume ``quantity`` units of ``medicine`` at ``location``, earliest expiry first.

    Must run inside a transaction: the candidate batches are locked so two
    concurrent fulfilments can't both draw on the same scarce batch.

    Returns a dict with ``deducted`` (units actually taken), ``remaining``
    (units that could not be covered), ``total_cost`` (Decimal) and
    ``batches`` ([(batch, units_taken), ...]).
    """
    batches = (
        StockBatch.objects
        .select_for_update()
        .filter(location=location, medicine=medicine, quantity__gt=0, is_deleted=False)
        .order_by('expiry_date', 'created_at')
    )

    remaining = quantity
    deducted = 0
    total_cost = Decimal('0')
    consumed = []

    for batch in batches:
        if remaining <= 0:
            break

        take = min(batch.quantity, remaining)
        batch.quantity -= take
        batch.save(update_fields=['quantity', 'updated_at'])

        total_cost += take * (batch.unit_cost or Decimal('0'))
        deducted += take
        remaining -= take
        consumed.append((batch, take))

    return {
        'deducted': deducted,
        'remaining': remaining,
        'total_cost': total_cost,
        'batches': consumed,
    }


def next_po_number(year=None):
    year = year or timezone.localdate().year
    prefix = f"PO-{year}-"
    count = PurchaseOrder.objects.filter(po_number__startswith=prefix).count()
    return f"{prefix}{count + 1:03d}"


@transaction.atomic
def create_purchase_order(items, supplier=None, location=None, auto_generated=False, created_by=None):
    """
    items: [{"name": str, "qty": int, "cost": Decimal, "medicine": Medicine|None,
             "batch_no": str, "expiry_date": date}, ...]
    """
    from pharmacy.models import Medicine

    if not items:
        raise ValidationError({'items': ['At least one item is required.']})

    po = PurchaseOrder.objects.create(
        po_number=next_po_number(),
        supplier=supplier,
        location=location,
        status='DRAFT',
        auto_generated=auto_generated,
        created_by=created_by,
    )

    total = Decimal('0')
    for item in items:
        medicine = item.get('medicine')
        if medicine is None:
            # name is only used to link the catalogue entry once, at entry time
            medicine = Medicine.objects.filter(name=item['name']).first()

        line = PurchaseOrderItem.objects.create(
            purchase_order=po,
            item_name=item['name'],
            medicine=medicine,
            quantity=int(item['qty']),
            unit_cost=Decimal(str(item.get('cost') or 0)),
            batch_no=item.get('batch_no') or '',
            expiry_date=item.get('expiry_date'),
        )
        total += line.line_total

    po.total_cost = total
    po.save(update_fields=['total_cost', 'updated_at'])
    return po


def receive_goods(po_id, location_id):
    """Book every line of a purchase order into ``location_id`` as new batches."""
    with transaction.atomic():
        po = PurchaseOrder.objects.select_for_update().filter(pk=po_id).first()
        if po is None or po.status == 'RECEIVED':
            raise InvalidPurchaseOrder()

        location = InventoryLocation.objects.filter(pk=location_id).first()
        if location is None:
            raise ValidationError({'location_id': ['Unknown location.']})

        expiry = default_expiry()
        batches = []
        for item in po.items.all():
            batches.append(StockBatch.objects.create(
                location=location,
                medicine=item.medicine,
                item_name=item.item_name,
                quantity=item.quantity,
                unit_cost=item.unit_cost,
                expiry_date=item.expiry_date or expiry,
                batch_no=item.batch_no or f"BATCH-{po.po_number}",
                supplier=po.supplier,
            ))
            item.received_qty = item.quantity
            item.save(update_fields=['received_qty', 'updated_at'])

        po.status = 'RECEIVED'
        po.received_at = timezone.now()
        po.save(update_fields=['status', 'received_at', 'updated_at'])

    logger.info("Received %s into %s (%d batches)", po.po_number, location.name, len(batches))
    return po, batches


def transfer_stock(from_location_id, to_location_id, item_name, quantity, user_name=None):
    """
    Move ``quantity`` units of ``item_name`` between locations.

    The source is the earliest-expiring batch that holds the full quantity;
    the destination batch (same batch_no) is topped up or created.
    """
    if str(from_location_id) == str(to_location_id):
        raise ValidationError({'to_location_id': ['Source and destination must differ.']})
    if quantity <= 0:
        raise ValidationError({'quantity': ['Quantity must be greater than 0.']})

    with transaction.atomic():
        source = (
            StockBatch.objects
            .select_for_update()
            .filter(location_id=from_location_id, item_name=item_name, quantity__gte=quantity, is_deleted=False)
            .order_by('expiry_date', 'created_at')
            .first()
        )
        if source is None:
            raise InsufficientSourceStock()

        to_location = InventoryLocation.objects.filter(pk=to_location_id).first()
        if to_location is None:
            raise ValidationError({'to_location_id': ['Unknown location.']})

        transfer = StockTransfer.objects.create(
            from_location_id=from_location_id,
            to_location=to_location,
            status='COMPLETED',
            requested_by=user_name or 'System',
        )
        StockTransferItem.objects.create(
            transfer=transfer,
            item_name=item_name,
            quantity=quantity,
            stock_batch=source,
        )

        source.quantity -= quantity
        source.save(update_fields=['quantity', 'updated_at'])

        dest = (
            StockBatch.objects
            .select_for_update()
            .filter(location=to_location, item_name=item_name, batch_no=source.batch_no)
            .first()
        )
        if dest:
            dest.quantity += quantity
            dest.save(update_fields=['quantity', 'updated_at'])
        else:
            dest = StockBatch.objects.create(
                location=to_location,
                medicine=source.medicine,
                item_name=item_name,
                quantity=quantity,
                batch_no=source.batch_no,
                expiry_date=source.expiry_date,
                unit_cost=source.unit_cost,
                supplier=source.supplier,
            )

    logger.info("Transferred %s x %s from %s to %s", quantity, item_name, from_location_id, to_location.name)
    return transfer


def low_stock_items(threshold=None, location_id=None):
    """Per (location, item) totals at or below ``threshold``."""
    threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    qs = StockBatch.objects.filter(is_deleted=False)
    if location_id:
        qs = qs.filter(location_id=location_id)
    return (
        qs.values('location_id', 'location__name', 'item_name')
        .annotate(total_qty=Sum('quantity'))
        .filter(total_qty__lte=threshold)
        .order_by('total_qty', 'item_name')
    )


def run_low_stock_sweep(threshold=None, reorder_qty=None, publisher=None):
    """
    Raise a draft purchase order for every (location, item) running low.

    An item that already has an open (DRAFT/ORDERED) order is skipped. The
    batch rows are re-read under lock before deciding, so a concurrent
    receipt or dispense is never raced.
    """
    threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    reorder_qty = reorder_qty or settings.LOW_STOCK_REORDER_QTY
    publisher = publisher or get_publisher()
    created = []

    for row in list(low_stock_items(threshold)):
        item_name = row['item_name']
        location_id = row['location_id']

        with transaction.atomic():
            batches = list(
                StockBatch.objects
                .select_for_update()
                .filter(location_id=location_id, item_name=item_name, is_deleted=False)
                .order_by('-created_at')
            )
            total = sum(b.quantity for b in batches)
            if total > threshold:
                continue

            if PurchaseOrderItem.objects.filter(
                item_name=item_name,
                purchase_order__status__in=OPEN_PO_STATUSES
            ).exists():
                continue

            latest = batches[0]
            po = create_purchase_order(
                [{
                    'name': item_name,
                    'qty': reorder_qty,
                    'cost': latest.unit_cost,
                    'medicine': latest.medicine,
                }],
                location=latest.location,
                auto_generated=True,
            )

            message = (
                f"Low stock alert: {item_name} at {row['location__name']} has only {total} units left. "
                f"Draft {po.po_number} created."
            )
            notify_roles(['PHARMACY', 'WAREHOUSE', 'ADMIN'], message, type='LOW_STOCK', related_id=po.id)

        logger.warning("Low stock: %s at %s (%s units), drafted %s", item_name, row['location__name'], total, po.po_number)
        publisher.emit('low_stock_alert', {
            'item_name': item_name,
            'location': row['location__name'],
            'quantity': total,
            'po_number': po.po_number,
        })
        created.append(po)

    return created


def stock_discrepancies(location=None):
    """
    Compare the legacy ``Medicine.stock`` counter with batch stock at the
    dispensing location. Returns one row per medicine where they differ.
    """
    from pharmacy.models import Medicine

    location = location or get_dispensing_location()
    if location is None:
        logger.warning("Dispensing location %r not found, cannot reconcile stock", settings.PHARMACY_DISPENSING_LOCATION)
        return []

    batch_totals = dict(
        StockBatch.objects
        .filter(location=location, medicine__isnull=False, is_deleted=False)
        .values('medicine_id')
        .annotate(total=Sum('quantity'))
        .values_list('medicine_id', 'total')
    )

    rows = []
    for medicine in Medicine.objects.filter(is_deleted=False).order_by('name'):
        batch_stock = batch_totals.get(medicine.id, 0) or 0
        if medicine.stock != batch_stock:
            rows.append({
                'medicine_id': medicine.id,
                'name': medicine.name,
                'legacy_stock': medicine.stock,
                'batch_stock': batch_stock,
                'difference': medicine.stock - batch_stock,
            })
    return rows


def link_batches_to_medicines():
    """Back-fill the medicine link on batches that only carry an item name."""
    from pharmacy.models import Medicine

    linked = 0
    for medicine in Medicine.objects.filter(is_deleted=False):
        linked += StockBatch.objects.filter(medicine__isnull=True, item_name=medicine.name).update(medicine=medicine)
    return linked
