from decimal import Decimal
from typing import List, Optional
from uuid import UUID

import attrs


@attrs.define(frozen=True)
class SeatStatus:
    """Seat-map snapshot for one event; read without locks."""

    paid_seat_ids: List[UUID] = attrs.field(factory=list)
    active_hold_seat_ids: List[UUID] = attrs.field(factory=list)


@attrs.define(frozen=True)
class SeatAvailability:
    unavailable_seat_ids: List[UUID] = attrs.field(factory=list)

    @property
    def is_available(self) -> bool:
        return not self.unavailable_seat_ids


@attrs.define(frozen=True)
class SeatPricing:
    seat_id: UUID
    seat_number: str
    row_name: str
    area_id: UUID
    area_name: str
    event_id: UUID
    price: Decimal
    showing_id: Optional[UUID] = None


@attrs.define(frozen=True)
class LockedSeat:
    """A seat row locked by the current reservation transaction."""

    seat_id: UUID
    area_id: UUID
    event_id: UUID
    price: Decimal
    showing_id: Optional[UUID] = None
