"""
Outpatient queue engine.

Tickets are issued against a per-doctor DailyQuota and called strictly in
arrival order. Every state change is broadcast through an EventPublisher so
kiosk, display and counter screens can refresh; the broadcast is best-effort
and screens re-sync from ``get_waiting`` / ``get_skipped`` anyway.

Ticket lifecycle (no transition guards, manual corrections are allowed):

    WAITING -> CALLED -> SERVED
    WAITING -> SKIPPED -> CALLED -> SERVED
"""
import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Prefetch
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from simrs_cms.events import get_publisher
from .exceptions import DoctorUnavailable, QueueClosed, QuotaFull, TicketNotFound, NoTicketWaiting
from .models import Doctor, DoctorLeave, DailyQuota, Poliklinik, Ticket
from .serializers import DailyQuotaSerializer, PoliklinikSerializer, TicketSerializer, DoctorSerializer

logger = logging.getLogger(__name__)


def get_today():
    return timezone.localdate()


def format_queue_code(prefix, number):
    return f"{prefix}-{number:03d}"


def _quota_payload(quota):
    return DailyQuotaSerializer(quota).data


def _ticket_queryset():
    return Ticket.objects.select_related('daily_quota__doctor__poliklinik')


def _get_ticket(ticket_id):
    ticket = _ticket_queryset().filter(pk=ticket_id).first()
    if ticket is None:
        raise TicketNotFound()
    return ticket


def _todays_tickets(status, poli_id=None):
    qs = _ticket_queryset().filter(status=status, daily_quota__date=get_today())
    if poli_id:
        qs = qs.filter(daily_quota__doctor__poliklinik_id=poli_id)
    # created_at first; queue_number breaks ties within one doctor's line
    return qs.order_by('created_at', 'queue_number')


def take_ticket(doctor_id, publisher=None):
    """
    Issue the next ticket for ``doctor_id`` against today's quota.

    The quota row is locked for the duration of the transaction so two
    concurrent requests can never share a queue_number or overshoot
    max_quota.
    """
    with transaction.atomic():
        quota = (
            DailyQuota.objects
            .select_for_update()
            .filter(doctor_id=doctor_id, date=get_today())
            .first()
        )

        if quota is None:
            raise DoctorUnavailable()
        if quota.status != 'OPEN':
            raise QueueClosed()
        if quota.current_count >= quota.max_quota:
            raise QuotaFull()

        quota.current_count += 1
        quota.save(update_fields=['current_count', 'updated_at'])

        doctor = Doctor.objects.select_related('poliklinik').get(pk=quota.doctor_id)
        quota.doctor = doctor

        ticket = Ticket.objects.create(
            daily_quota=quota,
            queue_number=quota.current_count,
            queue_code=format_queue_code(doctor.poliklinik.queue_code, quota.current_count),
            status='WAITING'
        )

    logger.info("Issued ticket %s for %s (%s/%s)", ticket.queue_code, doctor.name, quota.current_count, quota.max_quota)

    publisher = publisher or get_publisher()
    quota_data = _quota_payload(quota)
    publisher.emit('queue_update', {
        'ticket': TicketSerializer(ticket).data,
        'quota': quota_data,
        'doctor': DoctorSerializer(doctor).data,
    })
    # kiosk and dashboard counters follow status_update
    publisher.emit('status_update', quota_data)

    return {'ticket': ticket, 'quota': quota, 'doctor': doctor}


def call_next(counter_name, poli_id=None, publisher=None):
    """Call the oldest WAITING ticket of today, optionally within one poliklinik."""
    with transaction.atomic():
        ticket = (
            _todays_tickets('WAITING', poli_id)
            .select_for_update(skip_locked=True, of=('self',))
            .first()
        )
        if ticket is None:
            raise NoTicketWaiting()

        ticket.status = 'CALLED'
        ticket.counter_name = counter_name
        ticket.call_count += 1
        ticket.called_at = timezone.now()
        ticket.save(update_fields=['status', 'counter_name', 'call_count', 'called_at', 'updated_at'])

    poliklinik = ticket.poliklinik
    logger.info("Counter %s called %s", counter_name, ticket.queue_code)

    publisher = publisher or get_publisher()
    publisher.emit('call_patient', {
        'ticket': TicketSerializer(ticket).data,
        'counter_name': counter_name,
        'poliklinik': PoliklinikSerializer(poliklinik).data,
    })
    publisher.emit('queue_update', {'ticket': TicketSerializer(ticket).data})

    return {'ticket': ticket, 'counter_name': counter_name, 'poliklinik': poliklinik, 'doctor': ticket.doctor}


def _finish(ticket_id, status, publisher):
    ticket = _get_ticket(ticket_id)
    ticket.status = status
    ticket.finished_at = timezone.now()
    ticket.save(update_fields=['status', 'finished_at', 'updated_at'])

    logger.info("Ticket %s marked %s", ticket.queue_code, status)
    (publisher or get_publisher()).emit('queue_update', {'ticket': TicketSerializer(ticket).data})
    return ticket


def complete_ticket(ticket_id, publisher=None):
    return _finish(ticket_id, 'SERVED', publisher)


def skip_ticket(ticket_id, publisher=None):
    return _finish(ticket_id, 'SKIPPED', publisher)


def recall_skipped(ticket_id, counter_name, publisher=None):
    ticket = _get_ticket(ticket_id)
    if ticket.status != 'SKIPPED':
        logger.warning("Recalling ticket %s that is %s, not SKIPPED", ticket.queue_code, ticket.status)

    ticket.status = 'CALLED'
    ticket.counter_name = counter_name
    ticket.call_count += 1
    ticket.called_at = timezone.now()
    ticket.finished_at = None
    ticket.save(update_fields=['status', 'counter_name', 'call_count', 'called_at', 'finished_at', 'updated_at'])

    publisher = publisher or get_publisher()
    publisher.emit('call_patient', {
        'ticket': TicketSerializer(ticket).data,
        'counter_name': counter_name,
        'poliklinik': PoliklinikSerializer(ticket.poliklinik).data,
        'recall': True,
    })
    publisher.emit('queue_update', {'ticket': TicketSerializer(ticket).data})
    return ticket


def toggle_quota_status(doctor_id, status, max_quota=None, publisher=None):
    """Open/close today's quota for a doctor, creating it when missing."""
    doctor = Doctor.objects.select_related('poliklinik').filter(pk=doctor_id).first()
    if doctor is None:
        raise DoctorUnavailable('Doctor not found')

    with transaction.atomic():
        quota, created = DailyQuota.objects.select_for_update().get_or_create(
            doctor=doctor,
            date=get_today(),
            defaults={
                'status': status,
                'max_quota': max_quota or settings.DEFAULT_DAILY_QUOTA,
            }
        )
        if not created:
            if max_quota and max_quota < quota.current_count:
                raise ValidationError({
                    'max_quota': [f"Cannot be lower than tickets already issued ({quota.current_count})."]
                })
            quota.status = status
            if max_quota:
                quota.max_quota = max_quota
            quota.save(update_fields=['status', 'max_quota', 'updated_at'])

    quota.doctor = doctor
    logger.info("Quota for %s on %s set to %s (max %s)", doctor.name, quota.date, quota.status, quota.max_quota)
    (publisher or get_publisher()).emit('status_update', _quota_payload(quota))
    return quota


def generate_quotas():
    """Create today's OPEN quota for every doctor that has none yet."""
    today = get_today()
    created_quotas = []
    for doctor in Doctor.objects.filter(is_deleted=False):
        quota, created = DailyQuota.objects.get_or_create(
            doctor=doctor,
            date=today,
            defaults={'max_quota': settings.DEFAULT_DAILY_QUOTA, 'status': 'OPEN'}
        )
        if created:
            created_quotas.append(quota)
    return created_quotas


def doctors_with_quota(poli_id=None):
    qs = (
        Doctor.objects
        .filter(is_deleted=False)
        .select_related('poliklinik')
        .prefetch_related(
            'schedules',
            Prefetch('daily_quotas', queryset=DailyQuota.objects.filter(date=get_today()), to_attr='today_quotas')
        )
        .order_by('poliklinik__name', 'name')
    )
    if poli_id:
        qs = qs.filter(poliklinik_id=poli_id)
    return qs


def get_waiting(poli_id=None):
    return _todays_tickets('WAITING', poli_id)


def get_skipped(poli_id=None):
    return _todays_tickets('SKIPPED', poli_id)


def sync_daily_quotas(publisher=None):
    """
    Day-based quota housekeeping, run periodically.

    Doctors practising today get an OPEN quota unless they are on leave;
    a doctor whose leave is registered after the quota opened is closed.
    Quotas closed by hand are left closed.
    """
    today = get_today()
    weekday = today.isoweekday()
    publisher = publisher or get_publisher()
    summary = {'created': [], 'closed': []}

    doctors = Doctor.objects.filter(is_deleted=False, schedules__day=weekday).select_related('poliklinik').distinct()
    for doctor in doctors:
        on_leave = DoctorLeave.objects.filter(doctor=doctor, date=today).exists()
        quota = DailyQuota.objects.filter(doctor=doctor, date=today).first()

        if quota is None:
            if on_leave:
                logger.info("[Scheduler] Skipped quota for %s (on leave)", doctor.name)
                continue
            quota, created = DailyQuota.objects.get_or_create(
                doctor=doctor,
                date=today,
                defaults={'max_quota': settings.DEFAULT_DAILY_QUOTA, 'status': 'OPEN'}
            )
            if created:
                summary['created'].append(quota)
                logger.info("[Scheduler] Created quota for %s", doctor.name)
                quota.doctor = doctor
                publisher.emit('status_update', _quota_payload(quota))
        elif on_leave and quota.status != 'CLOSED':
            quota.status = 'CLOSED'
            quota.save(update_fields=['status', 'updated_at'])
            summary['closed'].append(quota)
            logger.info("[Scheduler] Closed %s (on leave)", doctor.name)
            quota.doctor = doctor
            publisher.emit('status_update', _quota_payload(quota))

    return summary


def list_polikliniks():
    return Poliklinik.objects.filter(is_active=True, is_deleted=False).order_by('name')
