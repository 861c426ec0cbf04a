from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from core.models import BaseModel


class InventoryLocation(BaseModel):
    LOCATION_TYPES = (
        ('WAREHOUSE', 'Warehouse'),
        ('DEPOT', 'Depot'),
    )

    name = models.CharField(max_length=255, unique=True)
    location_type = models.CharField(max_length=20, choices=LOCATION_TYPES, default='DEPOT')

    def __str__(self):
        return self.name


class Supplier(BaseModel):
    supplier_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    def __str__(self):
        return self.supplier_name


class StockBatch(BaseModel):
    """
    One physical lot of an item at a location.

    Batches are consumed earliest-expiry first and are never deleted;
    an exhausted batch stays behind with quantity 0.
    """
    location = models.ForeignKey(InventoryLocation, on_delete=models.PROTECT, related_name='batches')
    medicine = models.ForeignKey(
        'pharmacy.Medicine',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='batches'
    )
    item_name = models.CharField(max_length=255)
    batch_no = models.CharField(max_length=50)
    expiry_date = models.DateField()

    quantity = models.PositiveIntegerField(default=0)
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])

    supplier = models.ForeignKey(Supplier, on_delete=models.SET_NULL, null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['location', 'item_name', 'expiry_date'], name='batch_loc_item_expiry_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=0), name='stock_batch_quantity_non_negative'),
        ]

    def __str__(self):
        return f"{self.item_name} ({self.batch_no}) @ {self.location.name}"


class PurchaseOrder(BaseModel):
    STATUS_CHOICES = (
        ('DRAFT', 'Draft'),
        ('ORDERED', 'Ordered'),
        ('RECEIVED', 'Received'),
    )

    po_number = models.CharField(max_length=30, unique=True)
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, null=True, blank=True, related_name='purchase_orders')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='DRAFT')
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    received_at = models.DateTimeField(null=True, blank=True)

    # Drafts raised by the low-stock sweep
    auto_generated = models.BooleanField(default=False)
    location = models.ForeignKey(InventoryLocation, on_delete=models.SET_NULL, null=True, blank=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)

    def __str__(self):
        return self.po_number


class PurchaseOrderItem(BaseModel):
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name='items')
    item_name = models.CharField(max_length=255)
    medicine = models.ForeignKey('pharmacy.Medicine', on_delete=models.SET_NULL, null=True, blank=True)

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    received_qty = models.PositiveIntegerField(default=0)

    # Optional lot details; receiving falls back to defaults when blank
    batch_no = models.CharField(max_length=50, blank=True)
    expiry_date = models.DateField(null=True, blank=True)

    def __str__(self):
        return f"{self.item_name} x {self.quantity}"

    @property
    def line_total(self):
        return self.quantity * self.unit_cost


class StockTransfer(BaseModel):
    STATUS_CHOICES = (
        ('PENDING', 'Pending'),
        ('COMPLETED', 'Completed'),
    )

    from_location = models.ForeignKey(InventoryLocation, on_delete=models.PROTECT, related_name='transfers_out')
    to_location = models.ForeignKey(InventoryLocation, on_delete=models.PROTECT, related_name='transfers_in')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='COMPLETED')
    requested_by = models.CharField(max_length=150, default='System')

    def __str__(self):
        return f"{self.from_location.name} -> {self.to_location.name}"


class StockTransferItem(BaseModel):
    transfer = models.ForeignKey(StockTransfer, on_delete=models.CASCADE, related_name='items')
    item_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    stock_batch = models.ForeignKey(StockBatch, on_delete=models.PROTECT, related_name='transfer_items')

    def __str__(self):
        return f"{self.item_name} x {self.quantity}"
