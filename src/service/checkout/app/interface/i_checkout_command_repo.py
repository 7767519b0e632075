"""
Checkout Command Repository Interface

Every method runs in exactly one database transaction. Reservation methods take
row locks with FOR UPDATE SKIP LOCKED, so contenders for the same seat fail
fast instead of queueing, and any raised error rolls the whole call back.
"""

from abc import ABC, abstractmethod
from typing import Any, Collection, List, Optional
from uuid import UUID

from src.service.checkout.domain.entity.order_entity import Order
from src.service.checkout.domain.entity.seat_hold_entity import SeatHold
from src.service.checkout.domain.entity.ticket_entity import Ticket
from src.service.checkout.domain.enum.order_status import OrderStatus
from src.service.checkout.domain.value_object.checkout_request import GaRequest, TicketRequest
from src.service.checkout.domain.value_object.checkout_result import (
    GaOrderResult,
    OrderWithSeats,
    PaymentResult,
)


class ICheckoutCommandRepo(ABC):
    @abstractmethod
    async def create_order_with_seat_locks(
        self, *, order: Order, seat_ids: List[UUID]
    ) -> OrderWithSeats:
        """
        Lock explicit seats and create the order plus one hold per seat

        Args:
            order: New order (event/showing every seat must belong to)
            seat_ids: Non-empty list of seat IDs

        Returns:
            OrderWithSeats

        Raises:
            CheckoutValidationError: empty selection, seats outside the order's showing
            SeatsUnavailableError: a seat is locked by another transaction, ticketed or held
        """
        pass

    @abstractmethod
    async def create_ga_order_with_seat_locks(
        self, *, order: Order, requests: List[GaRequest]
    ) -> GaOrderResult:
        """
        Lock `quantity` free seats per area and create the order plus holds

        Args:
            order: New order; its total is replaced by the sum of locked seat prices
            requests: Area quantities; non-positive quantities are dropped

        Returns:
            GaOrderResult with the priced order, locked seats and total

        Raises:
            CheckoutValidationError: no positive quantity left
            InsufficientCapacityError: an area has fewer free seats than requested
        """
        pass

    @abstractmethod
    async def execute_order_transaction(self, *, order: Order, holds: List[SeatHold]) -> Order:
        """
        Insert the order then the given holds (order_id filled in) in one transaction.
        No conflict checking: the caller has already resolved seat selection.
        """
        pass

    @abstractmethod
    async def execute_payment_transaction(
        self, *, order_id: UUID, user_id: str, ticket_data: List[TicketRequest]
    ) -> PaymentResult:
        """
        Idempotently turn a reservation into a paid order with one ticket per seat

        Args:
            order_id: Order ID
            user_id: Owner of the order
            ticket_data: Seat and desired ticket status per seat; empty derives seats
                from the order's holds

        Returns:
            PaymentResult; a repeated call on a paid order returns the existing tickets

        Raises:
            OrderNotFoundError: no such order for this user
            OrderNotPayableError: status is neither pending nor pending_payment
            NoSeatHoldsError: the order has no unconfirmed holds
            OrderExpiredError: order or hold expired; the order is committed as expired first
        """
        pass

    @abstractmethod
    async def update_order_vnpay_data(
        self, *, order_id: UUID, vnpay_data: dict[str, Any]
    ) -> Optional[Order]:
        """Store {'provider': 'vnpay', 'data': vnpay_data} as payment metadata"""
        pass

    @abstractmethod
    async def update_order_status(
        self,
        *,
        order_id: UUID,
        status: OrderStatus,
        from_statuses: Optional[Collection[OrderStatus]] = None,
    ) -> Optional[Order]:
        """
        Set the order status

        Args:
            from_statuses: Only transition an order currently in one of these statuses

        Returns:
            The updated order, or None when no order matched
        """
        pass

    @abstractmethod
    async def confirm_seat_holds(self, *, user_id: str, order_id: UUID) -> int:
        """
        Mark the user's unconfirmed holds on the order as confirmed and paid

        Returns:
            Number of holds updated
        """
        pass

    @abstractmethod
    async def create_tickets(
        self, *, order_id: UUID, ticket_data: List[TicketRequest]
    ) -> List[Ticket]:
        """
        Bulk-insert tickets with event/showing/price resolved from each seat's area

        Args:
            order_id: Order the tickets belong to
            ticket_data: Seat and status per ticket; empty returns an empty list

        Raises:
            SeatsUnavailableError: a requested seat already has an active or used ticket
        """
        pass
