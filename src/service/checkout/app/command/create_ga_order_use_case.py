from datetime import datetime, timedelta, timezone
from typing import List, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_checkout_command_repo import ICheckoutCommandRepo
from src.service.checkout.app.interface.i_payment_gateway import IPaymentGateway
from src.service.checkout.domain.entity.order_entity import Order
from src.service.checkout.domain.value_object.checkout_request import GaRequest
from src.service.checkout.domain.value_object.checkout_result import PendingCheckout


class CreateGaOrderUseCase:
    """
    Reserve N seats per general-admission area.

    The repository picks the concrete seats under lock and prices the order
    from them, so there is no advisory read here.
    """

    def __init__(
        self,
        *,
        checkout_command_repo: ICheckoutCommandRepo,
        payment_gateway: IPaymentGateway,
        hold_minutes: int = settings.CHECKOUT_HOLD_MINUTES,
    ) -> None:
        self.checkout_command_repo = checkout_command_repo
        self.payment_gateway = payment_gateway
        self.hold_minutes = hold_minutes
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        checkout_command_repo: ICheckoutCommandRepo = Depends(
            Provide[Container.checkout_command_repo]
        ),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(checkout_command_repo=checkout_command_repo, payment_gateway=payment_gateway)

    @Logger.io
    async def execute(
        self,
        *,
        user_id: str,
        event_id: UUID,
        requests: List[GaRequest],
        client_ip: str,
        showing_id: Optional[UUID] = None,
    ) -> PendingCheckout:
        with self.tracer.start_as_current_span('use_case.create_ga_order') as span:
            span.set_attribute('event.id', str(event_id))

            order = Order.create(
                user_id=user_id,
                event_id=event_id,
                showing_id=showing_id,
                expires_at=datetime.now(timezone.utc) + timedelta(minutes=self.hold_minutes),
            )
            result = await self.checkout_command_repo.create_ga_order_with_seat_locks(
                order=order, requests=requests
            )
            span.set_attribute('order.id', str(order.id))
            span.set_attribute('seat.count', len(result.seats))

            payment_url = self.payment_gateway.build_payment_url(
                order_id=order.id,
                amount=result.total_amount,
                ip_addr=client_ip,
                order_info=f'Thanh toan don hang {order.id}',
            )
            txn_ref = self.payment_gateway.build_txn_ref(order_id=order.id)
            updated = await self.checkout_command_repo.update_order_vnpay_data(
                order_id=order.id, vnpay_data={'vnp_TxnRef': txn_ref}
            )

            return PendingCheckout(
                order=updated or result.order.with_vnpay_data({'vnp_TxnRef': txn_ref}),
                seat_ids=[seat.seat_id for seat in result.seats],
                payment_url=payment_url,
            )
