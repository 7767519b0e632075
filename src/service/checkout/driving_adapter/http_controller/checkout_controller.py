from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Request, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.command.confirm_payment_use_case import ConfirmPaymentUseCase
from src.service.checkout.app.command.create_ga_order_use_case import CreateGaOrderUseCase
from src.service.checkout.app.command.create_seat_order_use_case import CreateSeatOrderUseCase
from src.service.checkout.app.query.check_seat_availability_use_case import (
    CheckSeatAvailabilityUseCase,
)
from src.service.checkout.app.query.get_order_tickets_use_case import GetOrderTicketsUseCase
from src.service.checkout.app.query.get_seat_pricing_use_case import GetSeatPricingUseCase
from src.service.checkout.app.query.get_seat_status_use_case import GetSeatStatusUseCase
from src.service.checkout.app.query.list_unconfirmed_seat_holds_use_case import (
    ListUnconfirmedSeatHoldsUseCase,
)
from src.service.checkout.domain.value_object.checkout_request import GaRequest
from src.service.checkout.driving_adapter.http_controller.schema.checkout_schema import (
    GaOrderCreateRequest,
    OrderTicketsResponse,
    PendingCheckoutResponse,
    SeatAvailabilityResponse,
    SeatHoldResponse,
    SeatIdsRequest,
    SeatOrderCreateRequest,
    SeatPricingResponse,
    SeatStatusResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def get_current_user_id(x_user_id: str = Header(alias='X-User-Id', min_length=1)) -> str:
    """Identity is established upstream; this service trusts the forwarded header."""
    return x_user_id


def get_client_ip(request: Request) -> str:
    return request.client.host if request.client else '127.0.0.1'


@router.get('/events/{event_id}/seat-status')
@Logger.io
async def get_seat_status(
    event_id: UUID,
    use_case: GetSeatStatusUseCase = Depends(GetSeatStatusUseCase.depends),
) -> SeatStatusResponse:
    seat_status = await use_case.execute(event_id=event_id)
    return SeatStatusResponse(
        event_id=event_id,
        paid_seat_ids=seat_status.paid_seat_ids,
        active_hold_seat_ids=seat_status.active_hold_seat_ids,
    )


@router.post('/seats/pricing')
@Logger.io
async def get_seat_pricing(
    request: SeatIdsRequest,
    use_case: GetSeatPricingUseCase = Depends(GetSeatPricingUseCase.depends),
) -> List[SeatPricingResponse]:
    seats = await use_case.execute(seat_ids=request.seat_ids)
    return [SeatPricingResponse.from_pricing(seat) for seat in seats]


@router.post('/seats/availability')
@Logger.io
async def check_seat_availability(
    request: SeatIdsRequest,
    use_case: CheckSeatAvailabilityUseCase = Depends(CheckSeatAvailabilityUseCase.depends),
) -> SeatAvailabilityResponse:
    availability = await use_case.execute(seat_ids=request.seat_ids)
    return SeatAvailabilityResponse(
        is_available=availability.is_available,
        unavailable_seat_ids=availability.unavailable_seat_ids,
    )


@router.post('/orders', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_seat_order(
    request: SeatOrderCreateRequest,
    user_id: str = Depends(get_current_user_id),
    client_ip: str = Depends(get_client_ip),
    use_case: CreateSeatOrderUseCase = Depends(CreateSeatOrderUseCase.depends),
) -> PendingCheckoutResponse:
    with tracer.start_as_current_span('controller.create_seat_order') as span:
        span.set_attribute('event_id', str(request.event_id))
        span.set_attribute('seat.count', len(request.seat_ids))

        checkout = await use_case.execute(
            user_id=user_id,
            event_id=request.event_id,
            showing_id=request.showing_id,
            seat_ids=request.seat_ids,
            client_ip=client_ip,
        )

        span.set_attribute('order.id', str(checkout.order.id))
        return PendingCheckoutResponse.from_checkout(checkout)


@router.post('/orders/ga', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_ga_order(
    request: GaOrderCreateRequest,
    user_id: str = Depends(get_current_user_id),
    client_ip: str = Depends(get_client_ip),
    use_case: CreateGaOrderUseCase = Depends(CreateGaOrderUseCase.depends),
) -> PendingCheckoutResponse:
    with tracer.start_as_current_span('controller.create_ga_order') as span:
        span.set_attribute('event_id', str(request.event_id))

        checkout = await use_case.execute(
            user_id=user_id,
            event_id=request.event_id,
            showing_id=request.showing_id,
            requests=[
                GaRequest(area_id=area.area_id, quantity=area.quantity) for area in request.areas
            ],
            client_ip=client_ip,
        )

        span.set_attribute('order.id', str(checkout.order.id))
        return PendingCheckoutResponse.from_checkout(checkout)


@router.get('/orders/{order_id}/tickets')
@Logger.io
async def get_order_tickets(
    order_id: UUID,
    user_id: str = Depends(get_current_user_id),
    use_case: GetOrderTicketsUseCase = Depends(GetOrderTicketsUseCase.depends),
) -> OrderTicketsResponse:
    result = await use_case.execute(order_id=order_id, user_id=user_id)
    return OrderTicketsResponse.from_order_tickets(result)


@router.get('/holds')
@Logger.io
async def list_my_seat_holds(
    user_id: str = Depends(get_current_user_id),
    use_case: ListUnconfirmedSeatHoldsUseCase = Depends(ListUnconfirmedSeatHoldsUseCase.depends),
) -> List[SeatHoldResponse]:
    holds = await use_case.execute(user_id=user_id)
    return [SeatHoldResponse.from_hold(hold) for hold in holds]


@router.get('/vnpay/return')
@Logger.io
async def vnpay_return(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
) -> OrderTicketsResponse:
    with tracer.start_as_current_span('controller.vnpay_return') as span:
        params = dict(request.query_params)
        span.set_attribute('vnpay.txn_ref', params.get('vnp_TxnRef', ''))

        result = await use_case.execute(params=params, user_id=user_id)
        return OrderTicketsResponse.from_order_tickets(result)
