from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.service.checkout.domain.enum.ticket_status import (
    SEAT_BLOCKING_TICKET_STATUSES,
    TicketStatus,
)


@attrs.define
class Ticket:
    id: UUID
    order_id: UUID
    event_id: UUID
    seat_id: UUID
    price: Decimal
    status: TicketStatus = TicketStatus.ACTIVE
    showing_id: Optional[UUID] = None
    purchased_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        order_id: UUID,
        event_id: UUID,
        seat_id: UUID,
        price: Decimal,
        showing_id: Optional[UUID] = None,
        status: TicketStatus = TicketStatus.ACTIVE,
    ) -> 'Ticket':
        return cls(
            id=uuid7(),
            order_id=order_id,
            event_id=event_id,
            seat_id=seat_id,
            price=price,
            status=status,
            showing_id=showing_id,
            purchased_at=datetime.now(timezone.utc),
        )

    @property
    def blocks_seat(self) -> bool:
        return self.status in SEAT_BLOCKING_TICKET_STATUSES
