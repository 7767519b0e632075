"""
Checkout Command Repository Implementation

Locking protocol:
- Reservations lock seat rows with `FOR UPDATE OF seats SKIP LOCKED`. A seat
  locked by another in-flight transaction simply does not come back, so a
  contender sees a row-count shortfall and fails with SEATS_UNAVAILABLE or
  INSUFFICIENT_CAPACITY instead of waiting.
- Inside the lock the seat is re-checked against live tickets and unexpired
  unconfirmed holds, which closes the gap left by the advisory availability read.
- Payment locks the order row, then its unconfirmed holds (plain FOR UPDATE),
  so duplicate callbacks for one order serialize and the second one takes the
  "already paid" path.

Every public method owns exactly one transaction (`session.begin()`); any error
raised inside rolls back all holds, tickets and status changes of that call.
The one deliberate exception is expiry: the `expired` status is committed first
and OrderExpiredError is raised afterwards.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import (
    Any,
    AsyncContextManager,
    AsyncIterator,
    Callable,
    Collection,
    List,
    Optional,
    Sequence,
)
from uuid import UUID

from opentelemetry import trace
from sqlalchemy import select, union, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_checkout_command_repo import ICheckoutCommandRepo
from src.service.checkout.domain.checkout_errors import (
    CheckoutValidationError,
    InsufficientCapacityError,
    NoSeatHoldsError,
    OrderExpiredError,
    OrderNotFoundError,
    OrderNotPayableError,
    SeatsUnavailableError,
)
from src.service.checkout.domain.entity.order_entity import Order
from src.service.checkout.domain.entity.seat_hold_entity import SeatHold
from src.service.checkout.domain.entity.ticket_entity import Ticket
from src.service.checkout.domain.enum.order_status import OrderStatus
from src.service.checkout.domain.enum.payment_provider import PaymentProvider
from src.service.checkout.domain.enum.ticket_status import SEAT_BLOCKING_TICKET_STATUSES
from src.service.checkout.domain.value_object.checkout_request import (
    GaRequest,
    TicketRequest,
    normalize_ga_requests,
)
from src.service.checkout.domain.value_object.checkout_result import (
    GaOrderResult,
    OrderWithSeats,
    PaymentResult,
)
from src.service.checkout.domain.value_object.seat_snapshot import LockedSeat
from src.service.checkout.driven_adapter.model.order_model import OrderModel
from src.service.checkout.driven_adapter.model.seat_hold_model import SeatHoldModel
from src.service.checkout.driven_adapter.model.seating_model import AreaModel, RowModel, SeatModel
from src.service.checkout.driven_adapter.model.ticket_model import TicketModel
from src.service.checkout.driven_adapter.repo.checkout_row_mapper import (
    order_entity_to_model,
    order_model_to_entity,
    seat_hold_entity_to_model,
    seat_hold_model_to_entity,
    ticket_entity_to_model,
    ticket_model_to_entity,
)


tracer = trace.get_tracer(__name__)

_BLOCKING_TICKET_STATUS_VALUES = [status.value for status in SEAT_BLOCKING_TICKET_STATUSES]


class CheckoutCommandRepoImpl(ICheckoutCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            async with session.begin():
                yield session

    # ------------------------------------------------------------------
    # Seat-mapped reservation
    # ------------------------------------------------------------------

    @Logger.io
    async def create_order_with_seat_locks(
        self, *, order: Order, seat_ids: List[UUID]
    ) -> OrderWithSeats:
        requested = list(dict.fromkeys(seat_ids))
        if not requested:
            raise CheckoutValidationError('At least one seat must be selected')

        with tracer.start_as_current_span('checkout_repo.create_order_with_seat_locks') as span:
            span.set_attribute('order.id', str(order.id))
            span.set_attribute('seat.count', len(requested))

            async with self._transaction() as session:
                now = datetime.now(timezone.utc)

                locked = await self._lock_requested_seats(session, seat_ids=requested)
                if len(locked) < len(requested):
                    locked_ids = {seat.seat_id for seat in locked}
                    missing = [seat_id for seat_id in requested if seat_id not in locked_ids]
                    Logger.base.warning(
                        f'🔒 [SEAT-LOCK] {len(missing)}/{len(requested)} seats locked elsewhere '
                        f'for order {order.id}'
                    )
                    raise SeatsUnavailableError(missing)

                self._validate_seats_belong_to_order(order=order, locked=locked)

                conflicts = await self._find_taken_seats(session, seat_ids=requested, now=now)
                if conflicts:
                    Logger.base.warning(
                        f'🚫 [SEAT-LOCK] {len(conflicts)} seats already ticketed or held '
                        f'for order {order.id}'
                    )
                    raise SeatsUnavailableError(conflicts)

                holds = [self._new_hold(order=order, seat_id=seat_id) for seat_id in requested]
                await self._insert_order_with_holds(session, order=order, holds=holds)

            Logger.base.info(f'✅ [SEAT-LOCK] Order {order.id} holds {len(requested)} seats')
            return OrderWithSeats(order=order, seat_ids=requested)

    @staticmethod
    async def _lock_requested_seats(
        session: AsyncSession, *, seat_ids: Sequence[UUID]
    ) -> List[LockedSeat]:
        result = await session.execute(
            select(
                SeatModel.id,
                AreaModel.id,
                AreaModel.event_id,
                AreaModel.showing_id,
                AreaModel.price,
            )
            .join(RowModel, RowModel.id == SeatModel.row_id)
            .join(AreaModel, AreaModel.id == RowModel.area_id)
            .where(SeatModel.id.in_(seat_ids))
            .with_for_update(of=SeatModel, skip_locked=True)
        )
        return [
            LockedSeat(
                seat_id=seat_id,
                area_id=area_id,
                event_id=event_id,
                showing_id=showing_id,
                price=price,
            )
            for seat_id, area_id, event_id, showing_id, price in result.all()
        ]

    @staticmethod
    def _validate_seats_belong_to_order(*, order: Order, locked: Sequence[LockedSeat]) -> None:
        placements = {(seat.event_id, seat.showing_id) for seat in locked}
        if len(placements) > 1:
            raise CheckoutValidationError('Selected seats span multiple events or showings')

        event_id, showing_id = placements.pop()
        if event_id != order.event_id or showing_id != order.showing_id:
            raise CheckoutValidationError(
                'Selected seats do not belong to the requested event showing'
            )

    @staticmethod
    async def _find_taken_seats(
        session: AsyncSession, *, seat_ids: Sequence[UUID], now: datetime
    ) -> List[UUID]:
        ticketed = select(TicketModel.seat_id).where(
            TicketModel.seat_id.in_(seat_ids),
            TicketModel.status.in_(_BLOCKING_TICKET_STATUS_VALUES),
        )
        held = select(SeatHoldModel.seat_id).where(
            SeatHoldModel.seat_id.in_(seat_ids),
            SeatHoldModel.is_confirmed.is_(False),
            SeatHoldModel.expires_at > now,
        )
        result = await session.execute(union(ticketed, held))
        return sorted(result.scalars().all())

    # ------------------------------------------------------------------
    # General-admission reservation
    # ------------------------------------------------------------------

    @Logger.io
    async def create_ga_order_with_seat_locks(
        self, *, order: Order, requests: List[GaRequest]
    ) -> GaOrderResult:
        area_requests = normalize_ga_requests(requests)
        if not area_requests:
            raise CheckoutValidationError('At least one area must request a positive quantity')

        with tracer.start_as_current_span('checkout_repo.create_ga_order_with_seat_locks') as span:
            span.set_attribute('order.id', str(order.id))
            span.set_attribute('area.count', len(area_requests))

            async with self._transaction() as session:
                now = datetime.now(timezone.utc)
                locked_seats: List[LockedSeat] = []

                # Areas are locked one after another; a later shortfall rolls back earlier locks
                for request in area_requests:
                    seats = await self._lock_free_area_seats(
                        session, order=order, request=request, now=now
                    )
                    if len(seats) < request.quantity:
                        Logger.base.warning(
                            f'🎫 [GA-LOCK] Area {request.area_id}: requested {request.quantity}, '
                            f'free {len(seats)}'
                        )
                        raise InsufficientCapacityError(
                            area_id=request.area_id,
                            requested=request.quantity,
                            available=len(seats),
                        )
                    locked_seats.extend(seats)

                total_amount = sum((seat.price for seat in locked_seats), Decimal('0'))
                priced_order = order.with_total(total_amount)
                holds = [
                    self._new_hold(order=priced_order, seat_id=seat.seat_id)
                    for seat in locked_seats
                ]
                await self._insert_order_with_holds(session, order=priced_order, holds=holds)

            span.set_attribute('seat.count', len(locked_seats))
            Logger.base.info(
                f'✅ [GA-LOCK] Order {order.id} holds {len(locked_seats)} seats, '
                f'total {total_amount}'
            )
            return GaOrderResult(order=priced_order, seats=locked_seats, total_amount=total_amount)

    @staticmethod
    async def _lock_free_area_seats(
        session: AsyncSession, *, order: Order, request: GaRequest, now: datetime
    ) -> List[LockedSeat]:
        has_live_ticket = (
            select(TicketModel.id)
            .where(
                TicketModel.seat_id == SeatModel.id,
                TicketModel.status.in_(_BLOCKING_TICKET_STATUS_VALUES),
            )
            .exists()
        )
        has_active_hold = (
            select(SeatHoldModel.id)
            .where(
                SeatHoldModel.seat_id == SeatModel.id,
                SeatHoldModel.is_confirmed.is_(False),
                SeatHoldModel.expires_at > now,
            )
            .exists()
        )
        showing_matches = (
            AreaModel.showing_id == order.showing_id
            if order.showing_id is not None
            else AreaModel.showing_id.is_(None)
        )

        result = await session.execute(
            select(
                SeatModel.id,
                AreaModel.id,
                AreaModel.event_id,
                AreaModel.showing_id,
                AreaModel.price,
            )
            .join(RowModel, RowModel.id == SeatModel.row_id)
            .join(AreaModel, AreaModel.id == RowModel.area_id)
            .where(
                AreaModel.id == request.area_id,
                AreaModel.event_id == order.event_id,
                showing_matches,
                ~has_live_ticket,
                ~has_active_hold,
            )
            .order_by(SeatModel.id)
            .limit(request.quantity)
            .with_for_update(of=SeatModel, skip_locked=True)
        )
        return [
            LockedSeat(
                seat_id=seat_id,
                area_id=area_id,
                event_id=event_id,
                showing_id=showing_id,
                price=price,
            )
            for seat_id, area_id, event_id, showing_id, price in result.all()
        ]

    # ------------------------------------------------------------------
    # Order transaction primitive
    # ------------------------------------------------------------------

    @Logger.io
    async def execute_order_transaction(self, *, order: Order, holds: List[SeatHold]) -> Order:
        attached = [hold.attach_to_order(order.id) for hold in holds]
        async with self._transaction() as session:
            await self._insert_order_with_holds(session, order=order, holds=attached)

        Logger.base.info(f'📝 [ORDER] Order {order.id} created with {len(attached)} holds')
        return order

    @staticmethod
    def _new_hold(*, order: Order, seat_id: UUID) -> SeatHold:
        if order.expires_at is None:
            raise CheckoutValidationError('Reservation orders need an expiry')
        return SeatHold.create(
            event_id=order.event_id,
            showing_id=order.showing_id,
            user_id=order.user_id,
            order_id=order.id,
            seat_id=seat_id,
            expires_at=order.expires_at,
        )

    @staticmethod
    async def _insert_order_with_holds(
        session: AsyncSession, *, order: Order, holds: Sequence[SeatHold]
    ) -> None:
        session.add(order_entity_to_model(order))
        await session.flush()  # holds reference the order row

        if holds:
            session.add_all([seat_hold_entity_to_model(hold) for hold in holds])
            await session.flush()

    # ------------------------------------------------------------------
    # Payment confirmation
    # ------------------------------------------------------------------

    @Logger.io
    async def execute_payment_transaction(
        self, *, order_id: UUID, user_id: str, ticket_data: List[TicketRequest]
    ) -> PaymentResult:
        with tracer.start_as_current_span('checkout_repo.execute_payment_transaction') as span:
            span.set_attribute('order.id', str(order_id))

            async with self._transaction() as session:
                result = await session.execute(
                    select(OrderModel)
                    .where(OrderModel.id == order_id, OrderModel.user_id == user_id)
                    .with_for_update()
                )
                db_order = result.scalar_one_or_none()
                if db_order is None:
                    raise OrderNotFoundError(order_id)

                order = order_model_to_entity(db_order)
                if order.status == OrderStatus.PAID:
                    tickets = await self._select_order_tickets(session, order_id=order_id)
                    Logger.base.info(
                        f'♻️ [PAYMENT] Order {order_id} already paid, '
                        f'returning {len(tickets)} tickets'
                    )
                    return PaymentResult(order=order, tickets=tickets, seat_count=len(tickets))

                if not order.is_payable:
                    raise OrderNotPayableError(order.status.value)

                payment = await self._pay_locked_order(
                    session,
                    db_order=db_order,
                    ticket_data=ticket_data,
                    now=datetime.now(timezone.utc),
                )

            if payment is None:
                span.set_attribute('order.expired', True)
                Logger.base.warning(f'⌛ [PAYMENT] Order {order_id} expired before payment')
                raise OrderExpiredError(order_id)

            span.set_attribute('ticket.count', payment.seat_count)
            Logger.base.info(
                f'💳 [PAYMENT] Order {order_id} paid with {payment.seat_count} tickets'
            )
            return payment

    async def _pay_locked_order(
        self,
        session: AsyncSession,
        *,
        db_order: OrderModel,
        ticket_data: Sequence[TicketRequest],
        now: datetime,
    ) -> Optional[PaymentResult]:
        """Returns None after flipping the order to expired."""
        order = order_model_to_entity(db_order)
        if order.is_expired(now):
            self._apply_order_state(db_order, order.mark_as_expired(now))
            return None

        holds_result = await session.execute(
            select(SeatHoldModel)
            .where(SeatHoldModel.order_id == db_order.id, SeatHoldModel.is_confirmed.is_(False))
            .with_for_update()
        )
        db_holds = list(holds_result.scalars().all())
        if not db_holds:
            raise NoSeatHoldsError(db_order.id)
        holds = [seat_hold_model_to_entity(db_hold) for db_hold in db_holds]

        # Holds may carry a tighter deadline than the order itself
        if any(hold.is_expired(now) for hold in holds):
            self._apply_order_state(db_order, order.mark_as_expired(now))
            return None

        for db_hold, hold in zip(db_holds, holds):
            confirmed = hold.confirm()
            db_hold.is_confirmed = confirmed.is_confirmed
            db_hold.is_paid = confirmed.is_paid

        # A prior attempt may have issued tickets without flipping the status
        existing = await self._select_order_tickets(session, order_id=db_order.id)
        if existing:
            paid = order.mark_as_paid(now)
            self._apply_order_state(db_order, paid)
            return PaymentResult(order=paid, tickets=existing, seat_count=len(existing))

        requests = list(ticket_data) or [TicketRequest(seat_id=hold.seat_id) for hold in holds]
        tickets = await self._insert_tickets(session, order_id=db_order.id, requests=requests)
        paid = order.mark_as_paid(now)
        self._apply_order_state(db_order, paid)
        return PaymentResult(order=paid, tickets=tickets, seat_count=len(tickets))

    @staticmethod
    def _apply_order_state(db_order: OrderModel, order: Order) -> None:
        db_order.status = order.status.value
        db_order.updated_at = order.updated_at

    @staticmethod
    async def _select_order_tickets(session: AsyncSession, *, order_id: UUID) -> List[Ticket]:
        result = await session.execute(
            select(TicketModel).where(TicketModel.order_id == order_id).order_by(TicketModel.id)
        )
        return [ticket_model_to_entity(db_ticket) for db_ticket in result.scalars().all()]

    @staticmethod
    async def _insert_tickets(
        session: AsyncSession, *, order_id: UUID, requests: Sequence[TicketRequest]
    ) -> List[Ticket]:
        seat_ids = list(dict.fromkeys(request.seat_id for request in requests))
        status_by_seat = {request.seat_id: request.status for request in requests}

        result = await session.execute(
            select(SeatModel.id, AreaModel.event_id, AreaModel.showing_id, AreaModel.price)
            .join(RowModel, RowModel.id == SeatModel.row_id)
            .join(AreaModel, AreaModel.id == RowModel.area_id)
            .where(SeatModel.id.in_(seat_ids))
            .with_for_update(of=SeatModel)
        )
        seat_metadata = {
            seat_id: (event_id, showing_id, price)
            for seat_id, event_id, showing_id, price in result.all()
        }
        unknown = [seat_id for seat_id in seat_ids if seat_id not in seat_metadata]
        if unknown:
            raise CheckoutValidationError(
                f'Unknown seats: {", ".join(str(seat_id) for seat_id in unknown)}'
            )

        ticketed = await session.execute(
            select(TicketModel.seat_id).where(
                TicketModel.seat_id.in_(seat_ids),
                TicketModel.status.in_(_BLOCKING_TICKET_STATUS_VALUES),
            )
        )
        taken = sorted(set(ticketed.scalars().all()))
        if taken:
            Logger.base.warning(
                f'🚫 [TICKET] {len(taken)} seats already ticketed, order {order_id} gets none'
            )
            raise SeatsUnavailableError(taken)

        tickets = []
        for seat_id in seat_ids:
            event_id, showing_id, price = seat_metadata[seat_id]
            tickets.append(
                Ticket.create(
                    order_id=order_id,
                    event_id=event_id,
                    showing_id=showing_id,
                    seat_id=seat_id,
                    price=price,
                    status=status_by_seat[seat_id],
                )
            )

        session.add_all([ticket_entity_to_model(ticket) for ticket in tickets])
        await session.flush()
        return tickets

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    @Logger.io
    async def update_order_vnpay_data(
        self, *, order_id: UUID, vnpay_data: dict[str, Any]
    ) -> Optional[Order]:
        return await self._update_order(
            order_id=order_id,
            payment_metadata={'provider': PaymentProvider.VNPAY.value, 'data': vnpay_data},
        )

    @Logger.io
    async def update_order_status(
        self,
        *,
        order_id: UUID,
        status: OrderStatus,
        from_statuses: Optional[Collection[OrderStatus]] = None,
    ) -> Optional[Order]:
        conditions = []
        if from_statuses is not None:
            conditions.append(OrderModel.status.in_([s.value for s in from_statuses]))
        return await self._update_order(
            order_id=order_id, conditions=conditions, status=status.value
        )

    async def _update_order(
        self, *, order_id: UUID, conditions: Sequence[Any] = (), **values: Any
    ) -> Optional[Order]:
        async with self._transaction() as session:
            result = await session.execute(
                update(OrderModel)
                .where(OrderModel.id == order_id, *conditions)
                .values(**values, updated_at=datetime.now(timezone.utc))
                .returning(OrderModel)
            )
            db_order = result.scalar_one_or_none()
            return order_model_to_entity(db_order) if db_order else None

    @Logger.io
    async def confirm_seat_holds(self, *, user_id: str, order_id: UUID) -> int:
        async with self._transaction() as session:
            result = await session.execute(
                update(SeatHoldModel)
                .where(
                    SeatHoldModel.user_id == user_id,
                    SeatHoldModel.order_id == order_id,
                    SeatHoldModel.is_confirmed.is_(False),
                )
                .values(is_confirmed=True, is_paid=True)
            )
            return result.rowcount or 0

    @Logger.io
    async def create_tickets(
        self, *, order_id: UUID, ticket_data: List[TicketRequest]
    ) -> List[Ticket]:
        if not ticket_data:
            return []

        async with self._transaction() as session:
            return await self._insert_tickets(session, order_id=order_id, requests=ticket_data)
