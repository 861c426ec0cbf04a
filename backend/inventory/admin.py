from django.contrib import admin
from .models import InventoryLocation, Supplier, StockBatch, PurchaseOrder, PurchaseOrderItem, StockTransfer, StockTransferItem


@admin.register(InventoryLocation)
class InventoryLocationAdmin(admin.ModelAdmin):
    list_display = ('name', 'location_type')


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ('supplier_name', 'phone', 'is_active')


@admin.register(StockBatch)
class StockBatchAdmin(admin.ModelAdmin):
    list_display = ('item_name', 'batch_no', 'location', 'expiry_date', 'quantity', 'unit_cost')
    search_fields = ('item_name', 'batch_no')
    list_filter = ('location', 'expiry_date')


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 1


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ('po_number', 'supplier', 'status', 'total_cost', 'auto_generated', 'created_at')
    list_filter = ('status', 'auto_generated')
    inlines = [PurchaseOrderItemInline]


class StockTransferItemInline(admin.TabularInline):
    model = StockTransferItem
    extra = 0


@admin.register(StockTransfer)
class StockTransferAdmin(admin.ModelAdmin):
    list_display = ('from_location', 'to_location', 'status', 'requested_by', 'created_at')
    inlines = [StockTransferItemInline]
