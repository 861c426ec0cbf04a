from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    InventoryLocationViewSet, SupplierViewSet, StockBatchViewSet, PurchaseOrderViewSet,
    StockTransferViewSet, StockDiscrepancyView, LowStockSweepView
)

router = DefaultRouter()
router.register(r'locations', InventoryLocationViewSet, basename='locations')
router.register(r'suppliers', SupplierViewSet, basename='suppliers')
router.register(r'stock', StockBatchViewSet, basename='stock')
router.register(r'purchase-orders', PurchaseOrderViewSet, basename='purchase-orders')
router.register(r'transfers', StockTransferViewSet, basename='transfers')

urlpatterns = [
    path('discrepancies/', StockDiscrepancyView.as_view(), name='stock-discrepancies'),
    path('low-stock-sweep/', LowStockSweepView.as_view(), name='low-stock-sweep'),
    path('', include(router.urls)),
]
