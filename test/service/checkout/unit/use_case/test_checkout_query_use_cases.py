"""
Unit tests for the read-side checkout use cases and order status updates.
"""

from decimal import Decimal

import pytest
from uuid_utils.compat import uuid7

from src.service.checkout.app.command.update_order_status_use_case import (
    UpdateOrderStatusUseCase,
)
from src.service.checkout.app.query.check_seat_availability_use_case import (
    CheckSeatAvailabilityUseCase,
)
from src.service.checkout.app.query.get_order_tickets_use_case import GetOrderTicketsUseCase
from src.service.checkout.app.query.get_seat_pricing_use_case import GetSeatPricingUseCase
from src.service.checkout.app.query.get_seat_status_use_case import GetSeatStatusUseCase
from src.service.checkout.app.query.list_unconfirmed_seat_holds_use_case import (
    ListUnconfirmedSeatHoldsUseCase,
)
from src.service.checkout.domain.checkout_errors import OrderNotFoundError
from src.service.checkout.domain.enum.order_status import OrderStatus
from src.service.checkout.domain.value_object.seat_snapshot import (
    SeatAvailability,
    SeatStatus,
)
from test.service.checkout.unit.helpers import (
    EVENT_ID,
    USER_ID,
    RepositoryMocks,
    make_order,
    make_ticket_detail,
)


@pytest.fixture
def mocks():
    return RepositoryMocks()


class TestSeatQueries:
    @pytest.mark.asyncio
    async def test_seat_status_passes_through(self, mocks):
        snapshot = SeatStatus(paid_seat_ids=[uuid7()], active_hold_seat_ids=[uuid7()])
        mocks.checkout_query_repo.get_seat_status.return_value = snapshot

        result = await GetSeatStatusUseCase(mocks.checkout_query_repo).execute(event_id=EVENT_ID)

        assert result == snapshot
        mocks.checkout_query_repo.get_seat_status.assert_awaited_once_with(event_id=EVENT_ID)

    @pytest.mark.asyncio
    async def test_pricing_deduplicates_seat_ids(self, mocks):
        seat_a, seat_b = uuid7(), uuid7()
        mocks.checkout_query_repo.get_seat_pricing.return_value = []

        await GetSeatPricingUseCase(mocks.checkout_query_repo).execute(
            seat_ids=[seat_a, seat_b, seat_a]
        )

        mocks.checkout_query_repo.get_seat_pricing.assert_awaited_once_with(
            seat_ids=[seat_a, seat_b]
        )

    @pytest.mark.asyncio
    async def test_availability_reports_taken_seats(self, mocks):
        taken = uuid7()
        mocks.checkout_query_repo.get_seat_availability_status.return_value = SeatAvailability(
            unavailable_seat_ids=[taken]
        )

        result = await CheckSeatAvailabilityUseCase(mocks.checkout_query_repo).execute(
            seat_ids=[taken, uuid7()]
        )

        assert result.is_available is False
        assert result.unavailable_seat_ids == [taken]

    @pytest.mark.asyncio
    async def test_unconfirmed_holds_are_listed_for_user(self, mocks):
        mocks.checkout_query_repo.get_user_unconfirmed_seat_holds.return_value = []

        result = await ListUnconfirmedSeatHoldsUseCase(mocks.checkout_query_repo).execute(
            user_id=USER_ID
        )

        assert result == []
        mocks.checkout_query_repo.get_user_unconfirmed_seat_holds.assert_awaited_once_with(
            user_id=USER_ID
        )


class TestGetOrderTickets:
    @pytest.mark.asyncio
    async def test_returns_order_with_ticket_details(self, mocks):
        order = make_order(status=OrderStatus.PAID, total_amount=Decimal('100000.00'))
        tickets = [make_ticket_detail()]
        mocks.checkout_query_repo.get_order_by_id_for_user.return_value = order
        mocks.checkout_query_repo.get_ticket_details.return_value = tickets

        result = await GetOrderTicketsUseCase(mocks.checkout_query_repo).execute(
            order_id=order.id, user_id=USER_ID
        )

        assert result.order is order
        assert result.tickets == tickets

    @pytest.mark.asyncio
    async def test_foreign_or_missing_order_is_not_found(self, mocks):
        mocks.checkout_query_repo.get_order_by_id_for_user.return_value = None

        with pytest.raises(OrderNotFoundError):
            await GetOrderTicketsUseCase(mocks.checkout_query_repo).execute(
                order_id=uuid7(), user_id=USER_ID
            )

        mocks.checkout_query_repo.get_ticket_details.assert_not_awaited()


class TestUpdateOrderStatus:
    @pytest.mark.asyncio
    async def test_returns_updated_order(self, mocks):
        order = make_order(status=OrderStatus.CANCELLED)
        mocks.checkout_command_repo.update_order_status.return_value = order

        result = await UpdateOrderStatusUseCase(
            checkout_command_repo=mocks.checkout_command_repo
        ).execute(order_id=order.id, status=OrderStatus.CANCELLED)

        assert result.status == OrderStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_unknown_order_raises_not_found(self, mocks):
        mocks.checkout_command_repo.update_order_status.return_value = None

        with pytest.raises(OrderNotFoundError):
            await UpdateOrderStatusUseCase(
                checkout_command_repo=mocks.checkout_command_repo
            ).execute(order_id=uuid7(), status=OrderStatus.FAILED)
