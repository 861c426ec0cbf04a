from django.db import models
from django.core.validators import MinValueValidator
from core.models import BaseModel


class Medicine(BaseModel):
    name = models.CharField(max_length=255, unique=True)
    code = models.CharField(max_length=50, blank=True)
    category = models.CharField(max_length=100, blank=True)
    unit = models.CharField(max_length=30, default='Tablet')
    price = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])

    # Legacy aggregate counter, kept for older screens. Batch stock is authoritative;
    # a dispense short on batches still decrements this, so it may go negative.
    stock = models.IntegerField(default=0)
    reorder_level = models.PositiveIntegerField(default=10)

    def __str__(self):
        return self.name


class Prescription(BaseModel):
    STATUS_CHOICES = (
        ('PENDING', 'Pending'),
        ('PREPARING', 'Preparing'),
        ('COMPLETED', 'Completed'),
    )

    patient_name = models.CharField(max_length=255)
    medical_record_no = models.CharField(max_length=50, blank=True)
    doctor = models.ForeignKey(
        'queues.Doctor',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='prescriptions'
    )
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='PENDING')

    # Set when batch stock could not cover every item
    needs_review = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['status', 'created_at'], name='rx_status_created_idx'),
        ]

    def __str__(self):
        return f"Rx {self.patient_name} ({self.status})"


class PrescriptionItem(BaseModel):
    prescription = models.ForeignKey(Prescription, on_delete=models.CASCADE, related_name='items')
    medicine = models.ForeignKey(Medicine, on_delete=models.PROTECT, related_name='prescription_items')

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    dosage = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)

    # Weighted average unit cost of the batches actually consumed
    actual_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    dispensed_qty = models.PositiveIntegerField(default=0)
    shortfall_qty = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.medicine.name} x {self.quantity}"
