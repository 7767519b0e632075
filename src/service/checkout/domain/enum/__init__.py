"""Checkout Domain Enums"""

from src.service.checkout.domain.enum.order_status import PAYABLE_ORDER_STATUSES, OrderStatus
from src.service.checkout.domain.enum.payment_provider import PaymentProvider
from src.service.checkout.domain.enum.ticket_status import (
    SEAT_BLOCKING_TICKET_STATUSES,
    TicketStatus,
)

__all__ = [
    'OrderStatus',
    'PAYABLE_ORDER_STATUSES',
    'PaymentProvider',
    'SEAT_BLOCKING_TICKET_STATUSES',
    'TicketStatus',
]
