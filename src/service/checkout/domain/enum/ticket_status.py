from enum import StrEnum


class TicketStatus(StrEnum):
    ACTIVE = 'active'
    USED = 'used'
    REFUNDED = 'refunded'


# A ticket in one of these statuses takes its seat off sale for good
SEAT_BLOCKING_TICKET_STATUSES = (TicketStatus.ACTIVE, TicketStatus.USED)
