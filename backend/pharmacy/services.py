"""
Prescription workflow: PENDING -> PREPARING -> COMPLETED.

Completing a prescription dispenses it: batch stock at the dispensing depot is
consumed earliest expiry first and each item gets a weighted average cost
snapshot. The legacy ``Medicine.stock`` counter is decremented by the full
requested quantity regardless, see ``inventory.services`` for the two ledgers.
"""
import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import NotFound

from core.notifications import notify_roles
from inventory.services import deduct_fifo, get_dispensing_location
from simrs_cms.events import get_publisher
from .exceptions import InsufficientStock
from .models import Medicine, Prescription, PrescriptionItem
from .serializers import PrescriptionSerializer

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


def weighted_average(total_cost, quantity):
    if not quantity:
        return None
    return (Decimal(total_cost) / quantity).quantize(CENTS, rounding=ROUND_HALF_UP)


def _prescription_queryset():
    return Prescription.objects.select_related('doctor').prefetch_related('items__medicine')


def create_prescription(patient_name, items, doctor=None, medical_record_no='', notes='', publisher=None):
    """
    items: [{"medicine": Medicine, "quantity": int, "dosage": str, "notes": str}, ...]

    The legacy counter is checked per medicine; two lines for the same
    medicine are summed before comparing.
    """
    requested = defaultdict(int)
    for item in items:
        requested[item['medicine'].pk] += item['quantity']

    medicines = Medicine.objects.in_bulk(list(requested))
    for medicine_id, quantity in requested.items():
        medicine = medicines.get(medicine_id)
        if medicine is None or medicine.stock < quantity:
            name = medicine.name if medicine else 'Unknown item'
            raise InsufficientStock(f"Insufficient stock for {name}")

    with transaction.atomic():
        prescription = Prescription.objects.create(
            patient_name=patient_name,
            medical_record_no=medical_record_no or '',
            doctor=doctor,
            notes=notes or '',
        )
        PrescriptionItem.objects.bulk_create([
            PrescriptionItem(
                prescription=prescription,
                medicine=item['medicine'],
                quantity=item['quantity'],
                dosage=item.get('dosage') or '',
                notes=item.get('notes') or '',
            ) for item in items
        ])

    prescription = _prescription_queryset().get(pk=prescription.pk)
    logger.info("Prescription %s created for %s (%d items)", prescription.id, patient_name, len(items))

    # Pharmacy dashboard listens for new_prescription
    (publisher or get_publisher()).emit('new_prescription', PrescriptionSerializer(prescription).data)
    return prescription


def fulfill_prescription(prescription):
    """
    Consume batch stock for every item of ``prescription``.

    Must be called inside the transaction that moves the prescription to
    COMPLETED. Returns a list of ``(item, shortfall)`` for items batch stock
    could not fully cover; those are logged and flagged, never raised.
    """
    location = get_dispensing_location()
    if location is None:
        logger.warning("Dispensing location not found, skipping batch deduction for prescription %s", prescription.id)

    shortfalls = []
    for item in prescription.items.select_related('medicine'):
        if location is not None:
            result = deduct_fifo(location, item.medicine, item.quantity)

            item.dispensed_qty = result['deducted']
            item.shortfall_qty = result['remaining']
            if result['deducted'] > 0:
                item.actual_price = weighted_average(result['total_cost'], result['deducted'])
            item.save(update_fields=['dispensed_qty', 'shortfall_qty', 'actual_price', 'updated_at'])

            if result['remaining'] > 0:
                logger.warning(
                    "Partial fulfillment for %s on prescription %s. Missing: %s",
                    item.medicine.name, prescription.id, result['remaining']
                )
                shortfalls.append((item, result['remaining']))

        # Legacy ledger always takes the full requested quantity
        Medicine.objects.filter(pk=item.medicine_id).update(stock=F('stock') - item.quantity)

    if shortfalls:
        prescription.needs_review = True
        missing = ", ".join(f"{item.medicine.name} ({qty})" for item, qty in shortfalls)
        notify_roles(
            ['PHARMACY', 'ADMIN'],
            f"Prescription for {prescription.patient_name} dispensed short: {missing}",
            type='PRESCRIPTION_REVIEW',
            related_id=prescription.id
        )

    return shortfalls


def update_prescription_status(prescription_id, status, publisher=None):
    with transaction.atomic():
        prescription = Prescription.objects.select_for_update().filter(pk=prescription_id).first()
        if prescription is None:
            raise NotFound('Prescription not found')

        previous = prescription.status
        prescription.status = status

        # completed_at is set once; a prescription is dispensed at most one time
        if status == 'COMPLETED' and prescription.completed_at is None:
            fulfill_prescription(prescription)
            prescription.completed_at = timezone.now()

        prescription.save(update_fields=['status', 'needs_review', 'completed_at', 'updated_at'])

    prescription = _prescription_queryset().get(pk=prescription.pk)
    logger.info("Prescription %s: %s -> %s", prescription.id, previous, status)

    (publisher or get_publisher()).emit('prescription_update', PrescriptionSerializer(prescription).data)
    return prescription


def prescription_queue(status=None):
    qs = _prescription_queryset().filter(is_deleted=False)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by('created_at')
