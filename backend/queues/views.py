from rest_framework import viewsets, permissions, filters, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsHospitalStaff, IsAdminRole
from . import services
from .models import Counter
from .serializers import (
    CounterSerializer, PoliklinikSerializer, DailyQuotaSerializer, DoctorSerializer,
    DoctorAvailabilitySerializer, TicketSerializer, TakeTicketSerializer, CallNextSerializer,
    TicketActionSerializer, RecallSkippedSerializer, ToggleQuotaSerializer, PoliFilterSerializer
)


def poli_filter(request):
    # blank ?poli_id= means every poliklinik
    params = {key: value for key, value in request.query_params.items() if value}
    serializer = PoliFilterSerializer(data=params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data.get('poli_id')


class QuotaGenerateView(APIView):
    permission_classes = [IsAdminRole]

    def post(self, request):
        created = services.generate_quotas()
        return Response({'message': 'Quotas generated', 'count': len(created)})


class QuotaToggleView(APIView):
    permission_classes = [IsHospitalStaff]

    def post(self, request):
        serializer = ToggleQuotaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quota = services.toggle_quota_status(**serializer.validated_data)
        return Response(DailyQuotaSerializer(quota).data)


class TakeTicketView(APIView):
    """Kiosk endpoint: patients take a ticket without logging in."""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = TakeTicketSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = services.take_ticket(serializer.validated_data['doctor_id'])
        return Response({
            'ticket': TicketSerializer(result['ticket']).data,
            'quota': DailyQuotaSerializer(result['quota']).data,
            'doctor': DoctorSerializer(result['doctor']).data,
        }, status=status.HTTP_201_CREATED)


class DoctorAvailabilityView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        doctors = services.doctors_with_quota(poli_filter(request))
        return Response(DoctorAvailabilitySerializer(doctors, many=True).data)


class QueueViewSet(viewsets.ViewSet):
    """
    Counter-side operations on today's tickets.
    """
    permission_classes = [IsHospitalStaff]

    def get_permissions(self):
        # public display boards read the waiting list
        if self.action == 'waiting':
            return [permissions.AllowAny()]
        return super().get_permissions()

    @action(detail=False, methods=['post'])
    def call(self, request):
        serializer = CallNextSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = services.call_next(
            serializer.validated_data['counter_name'],
            serializer.validated_data.get('poli_id')
        )
        return Response({
            'ticket': TicketSerializer(result['ticket']).data,
            'counter_name': result['counter_name'],
            'poliklinik': PoliklinikSerializer(result['poliklinik']).data,
            'doctor': DoctorSerializer(result['doctor']).data,
        })

    @action(detail=False, methods=['post'])
    def complete(self, request):
        serializer = TicketActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ticket = services.complete_ticket(serializer.validated_data['ticket_id'])
        return Response(TicketSerializer(ticket).data)

    @action(detail=False, methods=['post'])
    def skip(self, request):
        serializer = TicketActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ticket = services.skip_ticket(serializer.validated_data['ticket_id'])
        return Response(TicketSerializer(ticket).data)

    @action(detail=False, methods=['post'], url_path='recall-skipped')
    def recall_skipped(self, request):
        serializer = RecallSkippedSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ticket = services.recall_skipped(
            serializer.validated_data['ticket_id'],
            serializer.validated_data['counter_name']
        )
        return Response(TicketSerializer(ticket).data)

    @action(detail=False, methods=['get'])
    def waiting(self, request):
        tickets = services.get_waiting(poli_filter(request))
        return Response(TicketSerializer(tickets, many=True).data)

    @action(detail=False, methods=['get'])
    def skipped(self, request):
        tickets = services.get_skipped(poli_filter(request))
        return Response(TicketSerializer(tickets, many=True).data)


class CounterViewSet(viewsets.ModelViewSet):
    queryset = Counter.objects.filter(is_deleted=False).order_by('name')
    serializer_class = CounterSerializer
    permission_classes = [IsHospitalStaff]


class PoliklinikViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = PoliklinikSerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [filters.SearchFilter]
    search_fields = ['name', 'queue_code']

    def get_queryset(self):
        return services.list_polikliniks()
