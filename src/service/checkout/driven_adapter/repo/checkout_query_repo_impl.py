from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional
from uuid import UUID

from sqlalchemy import select, union
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_checkout_query_repo import ICheckoutQueryRepo
from src.service.checkout.domain.entity.order_entity import Order
from src.service.checkout.domain.entity.seat_hold_entity import SeatHold
from src.service.checkout.domain.enum.order_status import OrderStatus
from src.service.checkout.domain.enum.payment_provider import PaymentProvider
from src.service.checkout.domain.enum.ticket_status import (
    SEAT_BLOCKING_TICKET_STATUSES,
    TicketStatus,
)
from src.service.checkout.domain.value_object.checkout_result import TicketDetail
from src.service.checkout.domain.value_object.seat_snapshot import (
    SeatAvailability,
    SeatPricing,
    SeatStatus,
)
from src.service.checkout.driven_adapter.model.order_model import OrderModel
from src.service.checkout.driven_adapter.model.seat_hold_model import SeatHoldModel
from src.service.checkout.driven_adapter.model.seating_model import AreaModel, RowModel, SeatModel
from src.service.checkout.driven_adapter.model.ticket_model import TicketModel
from src.service.checkout.driven_adapter.repo.checkout_row_mapper import (
    order_model_to_entity,
    seat_hold_model_to_entity,
)


class CheckoutQueryRepoImpl(ICheckoutQueryRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ):
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        """
        Get session for query execution.

        If a session is injected, yield it directly without context management.
        Otherwise, use session_factory context manager.
        """
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @Logger.io
    async def get_seat_status(self, *, event_id: UUID) -> SeatStatus:
        now = datetime.now(timezone.utc)
        async with self._get_session() as session:
            paid_result = await session.execute(
                select(TicketModel.seat_id)
                .join(SeatModel, SeatModel.id == TicketModel.seat_id)
                .join(RowModel, RowModel.id == SeatModel.row_id)
                .join(AreaModel, AreaModel.id == RowModel.area_id)
                .where(
                    AreaModel.event_id == event_id,
                    TicketModel.status.in_([s.value for s in SEAT_BLOCKING_TICKET_STATUSES]),
                )
                .distinct()
            )
            paid_seat_ids = sorted(paid_result.scalars().all())

            hold_query = (
                select(SeatHoldModel.seat_id)
                .where(SeatHoldModel.event_id == event_id, SeatHoldModel.expires_at > now)
                .distinct()
            )
            if paid_seat_ids:
                # A paid seat's stale hold is irrelevant
                hold_query = hold_query.where(SeatHoldModel.seat_id.not_in(paid_seat_ids))
            hold_result = await session.execute(hold_query)
            active_hold_seat_ids = sorted(hold_result.scalars().all())

        return SeatStatus(paid_seat_ids=paid_seat_ids, active_hold_seat_ids=active_hold_seat_ids)

    @Logger.io
    async def get_seat_pricing(self, *, seat_ids: List[UUID]) -> List[SeatPricing]:
        if not seat_ids:
            return []

        async with self._get_session() as session:
            result = await session.execute(
                select(
                    SeatModel.id,
                    SeatModel.seat_number,
                    RowModel.row_name,
                    AreaModel.id,
                    AreaModel.name,
                    AreaModel.event_id,
                    AreaModel.showing_id,
                    AreaModel.price,
                )
                .join(RowModel, RowModel.id == SeatModel.row_id)
                .join(AreaModel, AreaModel.id == RowModel.area_id)
                .where(SeatModel.id.in_(seat_ids))
            )
            rows = result.all()

        return [
            SeatPricing(
                seat_id=seat_id,
                seat_number=seat_number,
                row_name=row_name,
                area_id=area_id,
                area_name=area_name,
                event_id=event_id,
                showing_id=showing_id,
                price=price,
            )
            for (
                seat_id,
                seat_number,
                row_name,
                area_id,
                area_name,
                event_id,
                showing_id,
                price,
            ) in rows
        ]

    @Logger.io
    async def get_seat_availability_status(self, *, seat_ids: List[UUID]) -> SeatAvailability:
        if not seat_ids:
            return SeatAvailability()

        now = datetime.now(timezone.utc)
        ticketed_on_paid_order = (
            select(TicketModel.seat_id)
            .join(OrderModel, OrderModel.id == TicketModel.order_id)
            .where(TicketModel.seat_id.in_(seat_ids), OrderModel.status == OrderStatus.PAID.value)
        )
        under_hold = select(SeatHoldModel.seat_id).where(
            SeatHoldModel.seat_id.in_(seat_ids), SeatHoldModel.expires_at > now
        )

        async with self._get_session() as session:
            # UNION de-duplicates
            result = await session.execute(union(ticketed_on_paid_order, under_hold))
            unavailable = sorted(result.scalars().all())

        return SeatAvailability(unavailable_seat_ids=unavailable)

    @Logger.io
    async def get_order_by_vnpay_txn_ref(self, *, txn_ref: str) -> Optional[Order]:
        async with self._get_session() as session:
            result = await session.execute(
                select(OrderModel)
                .where(
                    OrderModel.payment_metadata['provider'].astext == PaymentProvider.VNPAY.value,
                    OrderModel.payment_metadata['data']['vnp_TxnRef'].astext == txn_ref,
                )
                .limit(1)
            )
            db_order = result.scalar_one_or_none()

            return order_model_to_entity(db_order) if db_order else None

    @Logger.io
    async def get_order_by_id_for_user(self, *, order_id: UUID, user_id: str) -> Optional[Order]:
        async with self._get_session() as session:
            result = await session.execute(
                select(OrderModel).where(OrderModel.id == order_id, OrderModel.user_id == user_id)
            )
            db_order = result.scalar_one_or_none()

            return order_model_to_entity(db_order) if db_order else None

    @Logger.io
    async def get_ticket_details(self, *, order_id: UUID) -> List[TicketDetail]:
        async with self._get_session() as session:
            result = await session.execute(
                select(
                    TicketModel.id,
                    TicketModel.seat_id,
                    SeatModel.seat_number,
                    RowModel.id,
                    RowModel.row_name,
                    AreaModel.id,
                    AreaModel.name,
                    TicketModel.status,
                    TicketModel.price,
                    TicketModel.showing_id,
                )
                .join(SeatModel, SeatModel.id == TicketModel.seat_id)
                .join(RowModel, RowModel.id == SeatModel.row_id)
                .join(AreaModel, AreaModel.id == RowModel.area_id)
                .where(TicketModel.order_id == order_id)
                .order_by(AreaModel.name, RowModel.row_name, SeatModel.seat_number)
            )
            rows = result.all()

        return [
            TicketDetail(
                ticket_id=ticket_id,
                seat_id=seat_id,
                seat_number=seat_number,
                row_id=row_id,
                row_name=row_name,
                area_id=area_id,
                area_name=area_name,
                status=TicketStatus(status),
                price=price,
                showing_id=showing_id,
            )
            for (
                ticket_id,
                seat_id,
                seat_number,
                row_id,
                row_name,
                area_id,
                area_name,
                status,
                price,
                showing_id,
            ) in rows
        ]

    @Logger.io
    async def get_user_unconfirmed_seat_holds(self, *, user_id: str) -> List[SeatHold]:
        now = datetime.now(timezone.utc)
        async with self._get_session() as session:
            result = await session.execute(
                select(SeatHoldModel)
                .where(
                    SeatHoldModel.user_id == user_id,
                    SeatHoldModel.is_confirmed.is_(False),
                    SeatHoldModel.expires_at > now,
                )
                .order_by(SeatHoldModel.expires_at)
            )
            return [seat_hold_model_to_entity(db_hold) for db_hold in result.scalars().all()]
