"""
Checkout error taxonomy

Each error carries a stable `code` plus the structured detail a caller needs to
react precisely (which seats changed, which area ran out), so callers branch on
the type instead of sniffing messages.

- Validation: CheckoutValidationError
- Conflict: SeatsUnavailableError, InsufficientCapacityError
- State: OrderNotFoundError, OrderUserMismatchError, OrderNotPayableError, NoSeatHoldsError
- Expiry: OrderExpiredError
- Gateway: PaymentVerificationError, PaymentFailedError, AmountMismatchError
"""

from typing import Any, Sequence
from uuid import UUID

from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    ForbiddenError,
    GoneError,
    NotFoundError,
)


class CheckoutValidationError(DomainError):
    code = 'VALIDATION_ERROR'

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class SeatsUnavailableError(ConflictError):
    code = 'SEATS_UNAVAILABLE'

    def __init__(self, seat_ids: Sequence[UUID], message: str | None = None) -> None:
        self.seat_ids = list(seat_ids)
        super().__init__(message or 'Selected seats are no longer available')

    def to_detail(self) -> dict[str, Any]:
        return super().to_detail() | {'seat_ids': [str(seat_id) for seat_id in self.seat_ids]}


class InsufficientCapacityError(ConflictError):
    code = 'INSUFFICIENT_CAPACITY'

    def __init__(self, *, area_id: UUID, requested: int, available: int) -> None:
        self.area_id = area_id
        self.requested = requested
        self.available = available
        super().__init__(
            f'Not enough seats available in area {area_id}: '
            f'requested {requested}, available {available}'
        )

    def to_detail(self) -> dict[str, Any]:
        return super().to_detail() | {
            'area_id': str(self.area_id),
            'requested': self.requested,
            'available': self.available,
        }


class OrderNotFoundError(NotFoundError):
    code = 'ORDER_NOT_FOUND'

    def __init__(self, order_id: UUID | str | None = None, message: str | None = None) -> None:
        self.order_id = order_id
        super().__init__(message or 'Order not found or user mismatch')

    def to_detail(self) -> dict[str, Any]:
        detail = super().to_detail()
        if self.order_id is not None:
            detail['order_id'] = str(self.order_id)
        return detail


class OrderUserMismatchError(ForbiddenError):
    code = 'ORDER_USER_MISMATCH'

    def __init__(self, order_id: UUID) -> None:
        self.order_id = order_id
        super().__init__('Order does not belong to authenticated user')

    def to_detail(self) -> dict[str, Any]:
        return super().to_detail() | {'order_id': str(self.order_id)}


class OrderNotPayableError(ConflictError):
    code = 'ORDER_NOT_PAYABLE'

    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f'Order cannot be paid from status {status}')

    def to_detail(self) -> dict[str, Any]:
        return super().to_detail() | {'status': self.status}


class NoSeatHoldsError(ConflictError):
    code = 'NO_SEAT_HOLDS'

    def __init__(self, order_id: UUID) -> None:
        self.order_id = order_id
        super().__init__('No seat holds found for this order')

    def to_detail(self) -> dict[str, Any]:
        return super().to_detail() | {'order_id': str(self.order_id)}


class OrderExpiredError(GoneError):
    code = 'ORDER_EXPIRED'

    def __init__(self, order_id: UUID, message: str | None = None) -> None:
        self.order_id = order_id
        super().__init__(message or 'Order has expired')

    def to_detail(self) -> dict[str, Any]:
        return super().to_detail() | {'order_id': str(self.order_id)}


class PaymentVerificationError(DomainError):
    code = 'INVALID_SIGNATURE'

    def __init__(self) -> None:
        super().__init__('Invalid VNPay response signature')


class PaymentFailedError(DomainError):
    code = 'PAYMENT_FAILED'

    def __init__(self, *, order_id: UUID, response_code: str) -> None:
        self.order_id = order_id
        self.response_code = response_code
        super().__init__(f'Payment failed with code: {response_code}', 402)

    def to_detail(self) -> dict[str, Any]:
        return super().to_detail() | {
            'order_id': str(self.order_id),
            'response_code': self.response_code,
        }


class AmountMismatchError(DomainError):
    code = 'AMOUNT_MISMATCH'

    def __init__(self, order_id: UUID) -> None:
        self.order_id = order_id
        super().__init__('Payment amount does not match order total')

    def to_detail(self) -> dict[str, Any]:
        return super().to_detail() | {'order_id': str(self.order_id)}
