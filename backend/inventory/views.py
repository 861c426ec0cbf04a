from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsStockKeeper, IsStockReader
from simrs_cms.utils import export_to_csv
from . import services
from .models import InventoryLocation, Supplier, StockBatch, PurchaseOrder, StockTransfer
from .serializers import (
    InventoryLocationSerializer, SupplierSerializer, StockBatchSerializer, PurchaseOrderSerializer,
    PurchaseOrderCreateSerializer, ReceiveGoodsSerializer, StockTransferSerializer, StockTransferCreateSerializer,
    StockFilterSerializer
)


def stock_filters(request):
    params = {key: value for key, value in request.query_params.items() if value}
    serializer = StockFilterSerializer(data=params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class InventoryLocationViewSet(viewsets.ModelViewSet):
    queryset = InventoryLocation.objects.filter(is_deleted=False).order_by('name')
    serializer_class = InventoryLocationSerializer
    permission_classes = [IsStockKeeper]


class SupplierViewSet(viewsets.ModelViewSet):
    queryset = Supplier.objects.all().order_by('-created_at')
    serializer_class = SupplierSerializer
    permission_classes = [IsStockKeeper]
    filter_backends = [filters.SearchFilter]
    search_fields = ['supplier_name', 'phone']


# Read-only: stock only enters through goods receipt or transfers
class StockBatchViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = StockBatchSerializer
    permission_classes = [IsStockReader]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['item_name', 'batch_no']
    ordering_fields = ['expiry_date', 'quantity', 'updated_at']
    ordering = ['expiry_date']

    def get_queryset(self):
        qs = StockBatch.objects.filter(is_deleted=False).select_related('location')
        location_id = stock_filters(self.request).get('location_id')
        if location_id:
            qs = qs.filter(location_id=location_id)
        # FIFO order, front-end highlights expired lots
        return qs.order_by('expiry_date')

    @action(detail=False, methods=['get'], url_path='low-stock')
    def low_stock(self, request):
        params = stock_filters(request)
        rows = services.low_stock_items(params.get('threshold'), params.get('location_id'))
        return Response([
            {
                'location_id': row['location_id'],
                'location': row['location__name'],
                'item_name': row['item_name'],
                'quantity': row['total_qty'],
            } for row in rows
        ])

    @action(detail=False, methods=['get'], url_path='export')
    def export_csv(self, request):
        return export_to_csv(
            self.filter_queryset(self.get_queryset()),
            "stock_batches",
            ['location.name', 'item_name', 'batch_no', 'expiry_date', 'quantity', 'unit_cost'],
            headers=['Location', 'Item', 'Batch', 'Expiry', 'Qty', 'Unit Cost']
        )


class PurchaseOrderViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = PurchaseOrder.objects.all().select_related('supplier').prefetch_related('items').order_by('-created_at')
    serializer_class = PurchaseOrderSerializer
    permission_classes = [IsStockKeeper]

    def create(self, request):
        serializer = PurchaseOrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        po = services.create_purchase_order(
            serializer.validated_data['items'],
            supplier=serializer.validated_data.get('supplier'),
            created_by=request.user if request.user.is_authenticated else None,
        )
        return Response(PurchaseOrderSerializer(po).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def pending(self, request):
        qs = self.get_queryset().filter(status__in=services.OPEN_PO_STATUSES)
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=True, methods=['post'])
    def receive(self, request, pk=None):
        serializer = ReceiveGoodsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        po, batches = services.receive_goods(pk, serializer.validated_data['location_id'])
        return Response({
            'message': 'Goods Received into Stock',
            'po': PurchaseOrderSerializer(po).data,
            'batches': StockBatchSerializer(batches, many=True).data,
        })


class StockTransferViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = StockTransfer.objects.all().prefetch_related('items__stock_batch').order_by('-created_at')
    serializer_class = StockTransferSerializer
    permission_classes = [IsStockKeeper]

    def create(self, request):
        serializer = StockTransferCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        transfer = services.transfer_stock(
            user_name=request.user.username,
            **serializer.validated_data
        )
        return Response(
            {'message': 'Transfer Successful', 'transfer': StockTransferSerializer(transfer).data},
            status=status.HTTP_201_CREATED
        )


class StockDiscrepancyView(APIView):
    """Legacy Medicine.stock vs batch stock at the dispensing depot."""
    permission_classes = [IsStockKeeper]

    def get(self, request):
        return Response(services.stock_discrepancies())


class LowStockSweepView(APIView):
    permission_classes = [IsStockKeeper]

    def post(self, request):
        created = services.run_low_stock_sweep()
        return Response({'created': PurchaseOrderSerializer(created, many=True).data})
