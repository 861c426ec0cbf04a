from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    QuotaGenerateView, QuotaToggleView, TakeTicketView, DoctorAvailabilityView,
    QueueViewSet, CounterViewSet, PoliklinikViewSet
)

router = DefaultRouter()
router.register(r'queues', QueueViewSet, basename='queues')
router.register(r'counters', CounterViewSet, basename='counters')
router.register(r'polies', PoliklinikViewSet, basename='polies')

urlpatterns = [
    path('quota/generate/', QuotaGenerateView.as_view(), name='quota-generate'),
    path('quota/toggle/', QuotaToggleView.as_view(), name='quota-toggle'),
    path('queue/ticket/', TakeTicketView.as_view(), name='take-ticket'),
    path('doctors/', DoctorAvailabilityView.as_view(), name='doctor-availability'),
    path('', include(router.urls)),
]
