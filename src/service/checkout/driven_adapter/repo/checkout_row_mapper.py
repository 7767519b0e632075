"""Conversions between checkout SQLAlchemy models and domain entities."""

from datetime import datetime, timezone

from src.service.checkout.domain.entity.order_entity import Order
from src.service.checkout.domain.entity.seat_hold_entity import SeatHold
from src.service.checkout.domain.entity.ticket_entity import Ticket
from src.service.checkout.domain.enum.order_status import OrderStatus
from src.service.checkout.domain.enum.ticket_status import TicketStatus
from src.service.checkout.driven_adapter.model.order_model import OrderModel
from src.service.checkout.driven_adapter.model.seat_hold_model import SeatHoldModel
from src.service.checkout.driven_adapter.model.ticket_model import TicketModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def order_model_to_entity(db_order: OrderModel) -> Order:
    return Order(
        id=db_order.id,
        user_id=db_order.user_id,
        event_id=db_order.event_id,
        showing_id=db_order.showing_id,
        total_amount=db_order.total_amount,
        status=OrderStatus(db_order.status),
        expires_at=db_order.expires_at,
        payment_metadata=db_order.payment_metadata,
        order_date=db_order.order_date,
        updated_at=db_order.updated_at,
    )


def order_entity_to_model(order: Order) -> OrderModel:
    # Timestamps are set explicitly so the row never needs a refresh after flush
    return OrderModel(
        id=order.id,
        user_id=order.user_id,
        event_id=order.event_id,
        showing_id=order.showing_id,
        total_amount=order.total_amount,
        status=order.status.value,
        expires_at=order.expires_at,
        payment_metadata=order.payment_metadata,
        order_date=order.order_date or _utcnow(),
        updated_at=order.updated_at or _utcnow(),
    )


def seat_hold_model_to_entity(db_hold: SeatHoldModel) -> SeatHold:
    return SeatHold(
        id=db_hold.id,
        event_id=db_hold.event_id,
        showing_id=db_hold.showing_id,
        user_id=db_hold.user_id,
        order_id=db_hold.order_id,
        seat_id=db_hold.seat_id,
        is_confirmed=db_hold.is_confirmed,
        is_paid=db_hold.is_paid,
        expires_at=db_hold.expires_at,
        created_at=db_hold.created_at,
    )


def seat_hold_entity_to_model(hold: SeatHold) -> SeatHoldModel:
    return SeatHoldModel(
        id=hold.id,
        event_id=hold.event_id,
        showing_id=hold.showing_id,
        user_id=hold.user_id,
        order_id=hold.order_id,
        seat_id=hold.seat_id,
        is_confirmed=hold.is_confirmed,
        is_paid=hold.is_paid,
        expires_at=hold.expires_at,
        created_at=hold.created_at or _utcnow(),
    )


def ticket_model_to_entity(db_ticket: TicketModel) -> Ticket:
    return Ticket(
        id=db_ticket.id,
        order_id=db_ticket.order_id,
        event_id=db_ticket.event_id,
        showing_id=db_ticket.showing_id,
        seat_id=db_ticket.seat_id,
        price=db_ticket.price,
        status=TicketStatus(db_ticket.status),
        purchased_at=db_ticket.purchased_at,
    )


def ticket_entity_to_model(ticket: Ticket) -> TicketModel:
    return TicketModel(
        id=ticket.id,
        order_id=ticket.order_id,
        event_id=ticket.event_id,
        showing_id=ticket.showing_id,
        seat_id=ticket.seat_id,
        price=ticket.price,
        status=ticket.status.value,
        purchased_at=ticket.purchased_at or _utcnow(),
    )
