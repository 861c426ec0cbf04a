from rest_framework import status
from rest_framework.exceptions import APIException


class InvalidPurchaseOrder(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid PO or already received'
    default_code = 'invalid_purchase_order'


class InsufficientSourceStock(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Insufficient stock in source location'
    default_code = 'insufficient_source_stock'
