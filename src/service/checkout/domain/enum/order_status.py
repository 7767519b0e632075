from enum import StrEnum


class OrderStatus(StrEnum):
    PENDING = 'pending'
    PENDING_PAYMENT = 'pending_payment'
    PAID = 'paid'
    EXPIRED = 'expired'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'
    FAILED = 'failed'


# An order can only be paid from one of these
PAYABLE_ORDER_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PENDING_PAYMENT})
