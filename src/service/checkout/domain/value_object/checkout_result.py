from decimal import Decimal
from typing import List, Optional
from uuid import UUID

import attrs

from src.service.checkout.domain.entity.order_entity import Order
from src.service.checkout.domain.entity.ticket_entity import Ticket
from src.service.checkout.domain.enum.ticket_status import TicketStatus
from src.service.checkout.domain.value_object.seat_snapshot import LockedSeat, SeatPricing


@attrs.define(frozen=True)
class OrderWithSeats:
    order: Order
    seat_ids: List[UUID]


@attrs.define(frozen=True)
class GaOrderResult:
    order: Order
    seats: List[LockedSeat]
    total_amount: Decimal


@attrs.define(frozen=True)
class PaymentResult:
    order: Order
    tickets: List[Ticket]
    seat_count: int


@attrs.define(frozen=True)
class TicketDetail:
    ticket_id: UUID
    seat_id: UUID
    seat_number: str
    row_id: UUID
    row_name: str
    area_id: UUID
    area_name: str
    status: TicketStatus
    price: Decimal
    showing_id: Optional[UUID] = None


@attrs.define(frozen=True)
class PendingCheckout:
    """A reserved order waiting for the customer to pay through the gateway."""

    order: Order
    seat_ids: List[UUID]
    payment_url: str
    seats: List[SeatPricing] = attrs.field(factory=list)


@attrs.define(frozen=True)
class OrderTickets:
    order: Order
    tickets: List[TicketDetail]
