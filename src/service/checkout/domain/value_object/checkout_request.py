from typing import Iterable, List
from uuid import UUID

import attrs

from src.service.checkout.domain.enum.ticket_status import TicketStatus


@attrs.define(frozen=True)
class GaRequest:
    area_id: UUID
    quantity: int


@attrs.define(frozen=True)
class TicketRequest:
    seat_id: UUID
    status: TicketStatus = TicketStatus.ACTIVE


def normalize_ga_requests(requests: Iterable[GaRequest]) -> List[GaRequest]:
    """
    Drop non-positive quantities and merge repeated areas, keeping first-seen order.

    Seats locked earlier in the same transaction are not skipped by SKIP LOCKED,
    so two requests for one area must become one request or the second would
    select the first one's seats again.
    """
    merged: dict[UUID, int] = {}
    for request in requests:
        if request.quantity <= 0:
            continue
        merged[request.area_id] = merged.get(request.area_id, 0) + request.quantity
    return [GaRequest(area_id=area_id, quantity=quantity) for area_id, quantity in merged.items()]
