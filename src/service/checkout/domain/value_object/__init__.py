"""Checkout Domain Value Objects"""

from src.service.checkout.domain.value_object.checkout_request import (
    GaRequest,
    TicketRequest,
    normalize_ga_requests,
)
from src.service.checkout.domain.value_object.checkout_result import (
    GaOrderResult,
    OrderTickets,
    OrderWithSeats,
    PaymentResult,
    PendingCheckout,
    TicketDetail,
)
from src.service.checkout.domain.value_object.seat_snapshot import (
    LockedSeat,
    SeatAvailability,
    SeatPricing,
    SeatStatus,
)
from src.service.checkout.domain.value_object.vnpay_return import VnpayReturn

__all__ = [
    'GaOrderResult',
    'GaRequest',
    'LockedSeat',
    'OrderTickets',
    'OrderWithSeats',
    'PaymentResult',
    'PendingCheckout',
    'SeatAvailability',
    'SeatPricing',
    'SeatStatus',
    'TicketDetail',
    'TicketRequest',
    'VnpayReturn',
    'normalize_ga_requests',
]
