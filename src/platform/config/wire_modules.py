"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.checkout.app.command import (
    confirm_payment_use_case,
    create_ga_order_use_case,
    create_seat_order_use_case,
    update_order_status_use_case,
)
from src.service.checkout.app.query import (
    check_seat_availability_use_case,
    get_order_tickets_use_case,
    get_seat_pricing_use_case,
    get_seat_status_use_case,
    list_unconfirmed_seat_holds_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    create_seat_order_use_case,
    create_ga_order_use_case,
    confirm_payment_use_case,
    update_order_status_use_case,
    get_seat_status_use_case,
    get_seat_pricing_use_case,
    check_seat_availability_use_case,
    get_order_tickets_use_case,
    list_unconfirmed_seat_holds_use_case,
]
