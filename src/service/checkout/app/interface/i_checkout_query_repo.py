"""
Checkout Query Repository Interface

Lock-free reads that feed the seat map, the checkout summary and the payment
callback. Nothing here is an authoritative gate for a reservation: the locking
transactions in ICheckoutCommandRepo are.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.service.checkout.domain.entity.order_entity import Order
from src.service.checkout.domain.entity.seat_hold_entity import SeatHold
from src.service.checkout.domain.value_object.checkout_result import TicketDetail
from src.service.checkout.domain.value_object.seat_snapshot import (
    SeatAvailability,
    SeatPricing,
    SeatStatus,
)


class ICheckoutQueryRepo(ABC):
    @abstractmethod
    async def get_seat_status(self, *, event_id: UUID) -> SeatStatus:
        """
        Seats of an event that are ticketed (active/used) or under an unexpired hold

        Args:
            event_id: Event ID

        Returns:
            SeatStatus with paid seat ids and active hold seat ids (a paid seat is
            never reported as held)
        """
        pass

    @abstractmethod
    async def get_seat_pricing(self, *, seat_ids: List[UUID]) -> List[SeatPricing]:
        """
        Per-seat area, price and showing metadata (Seat -> Row -> Area)

        Args:
            seat_ids: Seat IDs; an empty list returns an empty list without a query

        Returns:
            One SeatPricing per existing seat
        """
        pass

    @abstractmethod
    async def get_seat_availability_status(self, *, seat_ids: List[UUID]) -> SeatAvailability:
        """
        Which candidate seats are ticketed on a paid order or under an unexpired hold

        Args:
            seat_ids: Candidate seat IDs

        Returns:
            SeatAvailability with de-duplicated unavailable seat ids
        """
        pass

    @abstractmethod
    async def get_order_by_vnpay_txn_ref(self, *, txn_ref: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_order_by_id_for_user(self, *, order_id: UUID, user_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_ticket_details(self, *, order_id: UUID) -> List[TicketDetail]:
        """
        Tickets of an order joined with seat, row and area names

        Args:
            order_id: Order ID

        Returns:
            Ticket details ordered by area, row and seat number
        """
        pass

    @abstractmethod
    async def get_user_unconfirmed_seat_holds(self, *, user_id: str) -> List[SeatHold]:
        """Unexpired, unconfirmed holds owned by the user"""
        pass
