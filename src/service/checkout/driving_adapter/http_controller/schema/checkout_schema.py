from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.service.checkout.domain.entity.order_entity import Order
from src.service.checkout.domain.entity.seat_hold_entity import SeatHold
from src.service.checkout.domain.value_object.checkout_result import (
    OrderTickets,
    PendingCheckout,
    TicketDetail,
)
from src.service.checkout.domain.value_object.seat_snapshot import SeatPricing


class SeatIdsRequest(BaseModel):
    seat_ids: List[UUID]

    class Config:
        json_schema_extra = {
            'example': {'seat_ids': ['01936d8f-5e73-7c4e-a9c5-123456789abc']},
        }


class SeatOrderCreateRequest(BaseModel):
    event_id: UUID
    showing_id: Optional[UUID] = None
    seat_ids: List[UUID] = Field(min_length=1)

    class Config:
        json_schema_extra = {
            'example': {
                'event_id': '01936d8f-0000-7c4e-a9c5-000000000001',
                'showing_id': None,
                'seat_ids': [
                    '01936d8f-5e73-7c4e-a9c5-123456789abc',
                    '01936d8f-5e73-7c4e-a9c5-123456789abd',
                ],
            }
        }


class GaAreaRequest(BaseModel):
    area_id: UUID
    quantity: int


class GaOrderCreateRequest(BaseModel):
    event_id: UUID
    showing_id: Optional[UUID] = None
    areas: List[GaAreaRequest] = Field(min_length=1)

    class Config:
        json_schema_extra = {
            'example': {
                'event_id': '01936d8f-0000-7c4e-a9c5-000000000001',
                'areas': [{'area_id': '01936d8f-0000-7c4e-a9c5-0000000000a1', 'quantity': 2}],
            }
        }


class SeatStatusResponse(BaseModel):
    event_id: UUID
    paid_seat_ids: List[UUID]
    active_hold_seat_ids: List[UUID]


class SeatAvailabilityResponse(BaseModel):
    is_available: bool
    unavailable_seat_ids: List[UUID]


class SeatPricingResponse(BaseModel):
    seat_id: UUID
    seat_number: str
    row_name: str
    area_id: UUID
    area_name: str
    event_id: UUID
    showing_id: Optional[UUID] = None
    price: Decimal

    @classmethod
    def from_pricing(cls, pricing: SeatPricing) -> 'SeatPricingResponse':
        return cls(
            seat_id=pricing.seat_id,
            seat_number=pricing.seat_number,
            row_name=pricing.row_name,
            area_id=pricing.area_id,
            area_name=pricing.area_name,
            event_id=pricing.event_id,
            showing_id=pricing.showing_id,
            price=pricing.price,
        )


class OrderResponse(BaseModel):
    id: UUID
    user_id: str
    event_id: UUID
    showing_id: Optional[UUID] = None
    status: str
    total_amount: Decimal
    expires_at: Optional[datetime] = None
    order_date: Optional[datetime] = None

    @classmethod
    def from_order(cls, order: Order) -> 'OrderResponse':
        return cls(
            id=order.id,
            user_id=order.user_id,
            event_id=order.event_id,
            showing_id=order.showing_id,
            status=order.status.value,
            total_amount=order.total_amount,
            expires_at=order.expires_at,
            order_date=order.order_date,
        )


class PendingCheckoutResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'order_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'status': 'pending',
                'total_amount': '200000.00',
                'hold_expires': '2025-01-10T10:45:00Z',
                'payment_url': 'https://sandbox.vnpayment.vn/paymentv2/vpcpay.html?...',
                'seat_ids': ['01936d8f-5e73-7c4e-a9c5-123456789abd'],
                'seats': [],
            }
        },
    }

    order_id: UUID
    status: str
    total_amount: Decimal
    hold_expires: Optional[datetime]
    payment_url: str
    seat_ids: List[UUID]
    seats: List[SeatPricingResponse] = []

    @classmethod
    def from_checkout(cls, checkout: PendingCheckout) -> 'PendingCheckoutResponse':
        return cls(
            order_id=checkout.order.id,
            status=checkout.order.status.value,
            total_amount=checkout.order.total_amount,
            hold_expires=checkout.order.expires_at,
            payment_url=checkout.payment_url,
            seat_ids=checkout.seat_ids,
            seats=[SeatPricingResponse.from_pricing(seat) for seat in checkout.seats],
        )


class TicketDetailResponse(BaseModel):
    ticket_id: UUID
    seat_id: UUID
    seat_number: str
    row_id: UUID
    row_name: str
    area_id: UUID
    area_name: str
    status: str
    price: Decimal

    @classmethod
    def from_detail(cls, detail: TicketDetail) -> 'TicketDetailResponse':
        return cls(
            ticket_id=detail.ticket_id,
            seat_id=detail.seat_id,
            seat_number=detail.seat_number,
            row_id=detail.row_id,
            row_name=detail.row_name,
            area_id=detail.area_id,
            area_name=detail.area_name,
            status=detail.status.value,
            price=detail.price,
        )


class OrderTicketsResponse(BaseModel):
    order: OrderResponse
    ticket_count: int
    tickets: List[TicketDetailResponse]

    @classmethod
    def from_order_tickets(cls, result: OrderTickets) -> 'OrderTicketsResponse':
        return cls(
            order=OrderResponse.from_order(result.order),
            ticket_count=len(result.tickets),
            tickets=[TicketDetailResponse.from_detail(ticket) for ticket in result.tickets],
        )


class SeatHoldResponse(BaseModel):
    id: UUID
    order_id: Optional[UUID]
    event_id: UUID
    showing_id: Optional[UUID] = None
    seat_id: UUID
    expires_at: datetime

    @classmethod
    def from_hold(cls, hold: SeatHold) -> 'SeatHoldResponse':
        return cls(
            id=hold.id,
            order_id=hold.order_id,
            event_id=hold.event_id,
            showing_id=hold.showing_id,
            seat_id=hold.seat_id,
            expires_at=hold.expires_at,
        )
