from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_checkout_command_repo import ICheckoutCommandRepo
from src.service.checkout.app.interface.i_checkout_query_repo import ICheckoutQueryRepo
from src.service.checkout.app.interface.i_payment_gateway import IPaymentGateway
from src.service.checkout.domain.checkout_errors import (
    CheckoutValidationError,
    SeatsUnavailableError,
)
from src.service.checkout.domain.entity.order_entity import Order
from src.service.checkout.domain.value_object.checkout_result import PendingCheckout


class CreateSeatOrderUseCase:
    """
    Reserve explicitly chosen seats and hand back a VNPay payment URL.

    Flow:
    1. Advisory availability read (Fail Fast, no locks)
    2. Price the seats (Seat -> Row -> Area)
    3. Lock seats and insert order + holds in one transaction
    4. Build the signed payment URL and store its transaction reference

    Step 3 is the real gate: step 1 only saves a transaction when the answer
    is already known to be "no".
    """

    def __init__(
        self,
        *,
        checkout_query_repo: ICheckoutQueryRepo,
        checkout_command_repo: ICheckoutCommandRepo,
        payment_gateway: IPaymentGateway,
        hold_minutes: int = settings.CHECKOUT_HOLD_MINUTES,
    ) -> None:
        self.checkout_query_repo = checkout_query_repo
        self.checkout_command_repo = checkout_command_repo
        self.payment_gateway = payment_gateway
        self.hold_minutes = hold_minutes
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        checkout_query_repo: ICheckoutQueryRepo = Depends(Provide[Container.checkout_query_repo]),
        checkout_command_repo: ICheckoutCommandRepo = Depends(
            Provide[Container.checkout_command_repo]
        ),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(
            checkout_query_repo=checkout_query_repo,
            checkout_command_repo=checkout_command_repo,
            payment_gateway=payment_gateway,
        )

    @Logger.io
    async def execute(
        self,
        *,
        user_id: str,
        event_id: UUID,
        seat_ids: List[UUID],
        client_ip: str,
        showing_id: Optional[UUID] = None,
    ) -> PendingCheckout:
        requested = list(dict.fromkeys(seat_ids))
        if not requested:
            raise CheckoutValidationError('At least one seat must be selected')

        with self.tracer.start_as_current_span('use_case.create_seat_order') as span:
            span.set_attribute('event.id', str(event_id))
            span.set_attribute('seat.count', len(requested))

            availability = await self.checkout_query_repo.get_seat_availability_status(
                seat_ids=requested
            )
            if not availability.is_available:
                raise SeatsUnavailableError(availability.unavailable_seat_ids)

            seats = await self.checkout_query_repo.get_seat_pricing(seat_ids=requested)
            if len(seats) != len(requested):
                priced = {seat.seat_id for seat in seats}
                raise SeatsUnavailableError(
                    [seat_id for seat_id in requested if seat_id not in priced],
                    'Could not retrieve pricing for all selected seats',
                )
            total_amount = sum((seat.price for seat in seats), Decimal('0'))

            order = Order.create(
                user_id=user_id,
                event_id=event_id,
                showing_id=showing_id,
                total_amount=total_amount,
                expires_at=datetime.now(timezone.utc) + timedelta(minutes=self.hold_minutes),
            )
            reserved = await self.checkout_command_repo.create_order_with_seat_locks(
                order=order, seat_ids=requested
            )
            span.set_attribute('order.id', str(order.id))

            payment_url = self.payment_gateway.build_payment_url(
                order_id=order.id,
                amount=total_amount,
                ip_addr=client_ip,
                order_info=f'Thanh toan don hang {order.id}',
            )
            txn_ref = self.payment_gateway.build_txn_ref(order_id=order.id)
            updated = await self.checkout_command_repo.update_order_vnpay_data(
                order_id=order.id, vnpay_data={'vnp_TxnRef': txn_ref}
            )

            Logger.base.info(
                f'🛒 [CHECKOUT] Order {order.id} reserved {len(requested)} seats for {total_amount}'
            )
            return PendingCheckout(
                order=updated or reserved.order.with_vnpay_data({'vnp_TxnRef': txn_ref}),
                seat_ids=reserved.seat_ids,
                payment_url=payment_url,
                seats=seats,
            )
