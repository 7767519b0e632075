"""Builders and repository mocks shared by checkout unit tests."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

from uuid_utils.compat import uuid7

from src.service.checkout.app.interface.i_checkout_command_repo import ICheckoutCommandRepo
from src.service.checkout.app.interface.i_checkout_query_repo import ICheckoutQueryRepo
from src.service.checkout.app.interface.i_payment_gateway import IPaymentGateway
from src.service.checkout.domain.entity.order_entity import Order
from src.service.checkout.domain.enum.order_status import OrderStatus
from src.service.checkout.domain.enum.ticket_status import TicketStatus
from src.service.checkout.domain.value_object.checkout_result import TicketDetail


USER_ID = 'user-1'
OTHER_USER_ID = 'user-2'
EVENT_ID = UUID('01936d8f-0000-7c4e-a9c5-000000000001')


def make_order(
    *,
    status: OrderStatus = OrderStatus.PENDING,
    total_amount: Decimal = Decimal('200000.00'),
    user_id: str = USER_ID,
    expires_in: timedelta = timedelta(minutes=15),
    txn_ref: str | None = None,
) -> Order:
    now = datetime.now(timezone.utc)
    return Order(
        id=uuid7(),
        user_id=user_id,
        event_id=EVENT_ID,
        total_amount=total_amount,
        status=status,
        expires_at=now + expires_in,
        payment_metadata={'provider': 'vnpay', 'data': {'vnp_TxnRef': txn_ref}}
        if txn_ref
        else None,
        order_date=now,
        updated_at=now,
    )


def make_ticket_detail(*, seat_number: str = '1', price: Decimal = Decimal('100000.00')):
    return TicketDetail(
        ticket_id=uuid7(),
        seat_id=uuid7(),
        seat_number=seat_number,
        row_id=uuid7(),
        row_name='A',
        area_id=uuid7(),
        area_name='VIP',
        status=TicketStatus.ACTIVE,
        price=price,
    )


class RepositoryMocks:
    """AsyncMock-backed ports with the interface's method set."""

    def __init__(self) -> None:
        self.checkout_query_repo = AsyncMock(spec=ICheckoutQueryRepo)
        self.checkout_command_repo = AsyncMock(spec=ICheckoutCommandRepo)
        self.payment_gateway = MagicMock(spec=IPaymentGateway)
        self.payment_gateway.build_payment_url.return_value = (
            'https://sandbox.vnpayment.vn/paymentv2/vpcpay.html?vnp_TxnRef=abc'
        )
        self.payment_gateway.build_txn_ref.side_effect = lambda *, order_id: (
            str(order_id).replace('-', '')[:32]
        )
