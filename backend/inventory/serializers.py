from rest_framework import serializers
from .models import InventoryLocation, Supplier, StockBatch, PurchaseOrder, PurchaseOrderItem, StockTransfer, StockTransferItem


class InventoryLocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = InventoryLocation
        fields = ['id', 'name', 'location_type']


class SupplierSerializer(serializers.ModelSerializer):
    supplier_id = serializers.UUIDField(source='id', read_only=True)

    class Meta:
        model = Supplier
        fields = ['supplier_id', 'supplier_name', 'phone', 'address', 'is_active', 'created_at']
        read_only_fields = ['supplier_id', 'created_at']


class StockBatchSerializer(serializers.ModelSerializer):
    location = InventoryLocationSerializer(read_only=True)
    medicine_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = StockBatch
        fields = [
            'id', 'location', 'medicine_id', 'item_name', 'batch_no', 'expiry_date',
            'quantity', 'unit_cost', 'supplier', 'created_at', 'updated_at'
        ]


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PurchaseOrderItem
        fields = ['id', 'item_name', 'medicine', 'quantity', 'unit_cost', 'received_qty', 'batch_no', 'expiry_date']
        read_only_fields = ['id', 'received_qty']


class PurchaseOrderSerializer(serializers.ModelSerializer):
    items = PurchaseOrderItemSerializer(many=True, read_only=True)
    supplier_name = serializers.CharField(source='supplier.supplier_name', read_only=True, default=None)

    class Meta:
        model = PurchaseOrder
        fields = [
            'id', 'po_number', 'supplier', 'supplier_name', 'status', 'total_cost', 'received_at',
            'auto_generated', 'location', 'items', 'created_at'
        ]


class PurchaseOrderLineInput(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    qty = serializers.IntegerField(min_value=1)
    cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    batch_no = serializers.CharField(max_length=50, required=False, allow_blank=True)
    expiry_date = serializers.DateField(required=False, allow_null=True)


class PurchaseOrderCreateSerializer(serializers.Serializer):
    supplier_id = serializers.PrimaryKeyRelatedField(
        source='supplier', queryset=Supplier.objects.filter(is_active=True), required=False, allow_null=True
    )
    items = PurchaseOrderLineInput(many=True, allow_empty=False)


class ReceiveGoodsSerializer(serializers.Serializer):
    location_id = serializers.UUIDField()


class StockTransferItemSerializer(serializers.ModelSerializer):
    batch_no = serializers.CharField(source='stock_batch.batch_no', read_only=True)

    class Meta:
        model = StockTransferItem
        fields = ['id', 'item_name', 'quantity', 'batch_no']


class StockTransferSerializer(serializers.ModelSerializer):
    items = StockTransferItemSerializer(many=True, read_only=True)

    class Meta:
        model = StockTransfer
        fields = ['id', 'from_location', 'to_location', 'status', 'requested_by', 'items', 'created_at']


class StockTransferCreateSerializer(serializers.Serializer):
    from_location_id = serializers.UUIDField()
    to_location_id = serializers.UUIDField()
    item_name = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(min_value=1)


class StockFilterSerializer(serializers.Serializer):
    location_id = serializers.UUIDField(required=False, allow_null=True)
    threshold = serializers.IntegerField(required=False, allow_null=True, min_value=0)
