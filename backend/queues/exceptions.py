from rest_framework import status
from rest_framework.exceptions import APIException


class DoctorUnavailable(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Doctor not available today'
    default_code = 'doctor_unavailable'


class QueueClosed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Queue is closed'
    default_code = 'queue_closed'


class QuotaFull(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Quota full'
    default_code = 'quota_full'


class TicketNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Ticket not found'
    default_code = 'ticket_not_found'


class NoTicketWaiting(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'No more patients in queue'
    default_code = 'no_ticket_waiting'
