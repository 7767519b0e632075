"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.checkout.driven_adapter.model.event_model import EventModel, ShowingModel
from src.service.checkout.driven_adapter.model.order_model import OrderModel
from src.service.checkout.driven_adapter.model.seat_hold_model import SeatHoldModel
from src.service.checkout.driven_adapter.model.seating_model import AreaModel, RowModel, SeatModel
from src.service.checkout.driven_adapter.model.ticket_model import TicketModel

__all__ = [
    'AreaModel',
    'EventModel',
    'OrderModel',
    'RowModel',
    'SeatHoldModel',
    'SeatModel',
    'ShowingModel',
    'TicketModel',
]
