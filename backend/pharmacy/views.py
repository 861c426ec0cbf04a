from django.db.models import Sum, Q
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.response import Response

from core.permissions import IsHospitalStaff, IsStockKeeper, IsStockReader
from inventory.services import get_dispensing_location
from . import services
from .models import Medicine
from .serializers import (
    MedicineSerializer, PrescriptionSerializer, PrescriptionCreateSerializer, PrescriptionStatusSerializer
)


class MedicineViewSet(viewsets.ModelViewSet):
    serializer_class = MedicineSerializer
    permission_classes = [IsStockKeeper]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'code', 'category']
    ordering_fields = ['name', 'stock']
    ordering = ['name']

    def get_permissions(self):
        if self.action in ('list', 'retrieve'):
            return [IsStockReader()]
        return super().get_permissions()

    def get_queryset(self):
        qs = Medicine.objects.filter(is_deleted=False)
        location = get_dispensing_location()
        if location is not None:
            qs = qs.annotate(batch_stock=Sum(
                'batches__quantity',
                filter=Q(batches__location=location, batches__is_deleted=False)
            ))
        return qs

    def perform_destroy(self, instance):
        instance.is_deleted = True
        instance.save(update_fields=['is_deleted', 'updated_at'])


class PrescriptionViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Pharmacy queue. Doctors write prescriptions, pharmacy staff move them
    through PENDING -> PREPARING -> COMPLETED.
    """
    serializer_class = PrescriptionSerializer
    permission_classes = [IsHospitalStaff]

    def get_queryset(self):
        return services.prescription_queue(self.request.query_params.get('status'))

    def create(self, request):
        serializer = PrescriptionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        prescription = services.create_prescription(**serializer.validated_data)
        return Response(PrescriptionSerializer(prescription).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['put', 'patch'], url_path='status', permission_classes=[IsStockKeeper])
    def set_status(self, request, pk=None):
        serializer = PrescriptionStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        prescription = services.update_prescription_status(pk, serializer.validated_data['status'])
        return Response(PrescriptionSerializer(prescription).data)
