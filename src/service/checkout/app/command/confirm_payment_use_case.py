from decimal import Decimal
from typing import Mapping, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_checkout_command_repo import ICheckoutCommandRepo
from src.service.checkout.app.interface.i_checkout_query_repo import ICheckoutQueryRepo
from src.service.checkout.app.interface.i_payment_gateway import IPaymentGateway
from src.service.checkout.domain.checkout_errors import (
    AmountMismatchError,
    OrderNotFoundError,
    OrderUserMismatchError,
    PaymentFailedError,
    PaymentVerificationError,
)
from src.service.checkout.domain.entity.order_entity import Order
from src.service.checkout.domain.enum.order_status import PAYABLE_ORDER_STATUSES, OrderStatus
from src.service.checkout.domain.value_object.checkout_result import OrderTickets


AMOUNT_TOLERANCE = Decimal('0.01')


class ConfirmPaymentUseCase:
    """
    Handle the customer's redirect back from VNPay.

    Flow:
    1. Verify the signature of the return query
    2. Resolve the order from the stored transaction reference
    3. Reject another user's order
    4. Already PAID -> return existing tickets (duplicate callback)
    5. Gateway failure or amount mismatch -> a payable order becomes FAILED;
       terminal orders keep their status
    6. Otherwise run the payment transaction: confirm holds, issue tickets, mark PAID
    """

    def __init__(
        self,
        *,
        checkout_query_repo: ICheckoutQueryRepo,
        checkout_command_repo: ICheckoutCommandRepo,
        payment_gateway: IPaymentGateway,
    ) -> None:
        self.checkout_query_repo = checkout_query_repo
        self.checkout_command_repo = checkout_command_repo
        self.payment_gateway = payment_gateway
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
    async def execute(self, *, params: Mapping[str, str], user_id: str) -> OrderTickets:
        with self.tracer.start_as_current_span('use_case.confirm_payment') as span:
            vnpay_return = self.payment_gateway.verify_return(params=params)
            if not vnpay_return.is_verified:
                raise PaymentVerificationError()

            order = await self.checkout_query_repo.get_order_by_vnpay_txn_ref(
                txn_ref=vnpay_return.txn_ref
            )
            if order is None:
                raise OrderNotFoundError(
                    message='Order not found for this transaction reference'
                )
            span.set_attribute('order.id', str(order.id))

            if order.user_id != user_id:
                raise OrderUserMismatchError(order.id)

            if order.status == OrderStatus.PAID:
                Logger.base.info(f'♻️ [PAYMENT] Duplicate callback for paid order {order.id}')
                tickets = await self.checkout_query_repo.get_ticket_details(order_id=order.id)
                return OrderTickets(order=order, tickets=tickets)

            if not vnpay_return.is_success:
                await self._mark_failed(order)
                raise PaymentFailedError(
                    order_id=order.id, response_code=vnpay_return.response_code
                )

            if abs(vnpay_return.amount - order.total_amount) > AMOUNT_TOLERANCE:
                await self._mark_failed(order)
                raise AmountMismatchError(order.id)

            # Empty ticket data: seats come from this order's own holds
            payment = await self.checkout_command_repo.execute_payment_transaction(
                order_id=order.id, user_id=order.user_id, ticket_data=[]
            )
            span.set_attribute('ticket.count', payment.seat_count)

            tickets = await self.checkout_query_repo.get_ticket_details(order_id=order.id)
            return OrderTickets(order=payment.order, tickets=tickets)

    async def _mark_failed(self, order: Order) -> None:
        if not order.is_payable:
            Logger.base.warning(
                f'⚠️ [PAYMENT] Failed callback ignored for {order.status} order {order.id}'
            )
            return
        await self.checkout_command_repo.update_order_status(
            order_id=order.id, status=OrderStatus.FAILED, from_statuses=PAYABLE_ORDER_STATUSES
        )
