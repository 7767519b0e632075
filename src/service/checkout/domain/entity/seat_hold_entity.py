from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7


@attrs.define
class SeatHold:
    """Provisional, time-boxed claim on one seat for one order."""

    id: UUID
    event_id: UUID
    user_id: str
    seat_id: UUID
    expires_at: datetime
    showing_id: Optional[UUID] = None
    order_id: Optional[UUID] = None
    is_confirmed: bool = False
    is_paid: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        event_id: UUID,
        user_id: str,
        seat_id: UUID,
        expires_at: datetime,
        showing_id: Optional[UUID] = None,
        order_id: Optional[UUID] = None,
    ) -> 'SeatHold':
        return cls(
            id=uuid7(),
            event_id=event_id,
            user_id=user_id,
            seat_id=seat_id,
            expires_at=expires_at,
            showing_id=showing_id,
            order_id=order_id,
            created_at=datetime.now(timezone.utc),
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or datetime.now(timezone.utc))

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """Unexpired and unconfirmed holds keep the seat off sale."""
        return not self.is_confirmed and not self.is_expired(now)

    def attach_to_order(self, order_id: UUID) -> 'SeatHold':
        return attrs.evolve(self, order_id=order_id)

    def confirm(self) -> 'SeatHold':
        return attrs.evolve(self, is_confirmed=True, is_paid=True)
