"""
Unit tests for CreateSeatOrderUseCase

Focus:
1. Fail Fast: empty selection, advisory availability, missing pricing
2. Happy path: order priced from seats, locked, VNPay reference stored
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from uuid_utils.compat import uuid7

from src.service.checkout.app.command.create_seat_order_use_case import CreateSeatOrderUseCase
from src.service.checkout.domain.checkout_errors import (
    CheckoutValidationError,
    SeatsUnavailableError,
)
from src.service.checkout.domain.value_object.checkout_result import OrderWithSeats
from src.service.checkout.domain.value_object.seat_snapshot import SeatAvailability, SeatPricing
from test.service.checkout.unit.helpers import EVENT_ID, USER_ID, RepositoryMocks


def _pricing(seat_id, price: str) -> SeatPricing:
    return SeatPricing(
        seat_id=seat_id,
        seat_number='1',
        row_name='A',
        area_id=uuid7(),
        area_name='VIP',
        event_id=EVENT_ID,
        price=Decimal(price),
    )


class TestCreateSeatOrder:
    @pytest.fixture
    def mocks(self):
        return RepositoryMocks()

    @pytest.fixture
    def use_case(self, mocks):
        return CreateSeatOrderUseCase(
            checkout_query_repo=mocks.checkout_query_repo,
            checkout_command_repo=mocks.checkout_command_repo,
            payment_gateway=mocks.payment_gateway,
            hold_minutes=15,
        )

    @pytest.mark.asyncio
    async def test_create_order_for_free_seats(self, mocks, use_case):
        """
        Given: two free seats priced 100000 and 50000
        When: the user checks out
        Then:
          - a pending order totalling 150000 is locked with both seats
          - the VNPay transaction reference is stored on the order
          - the payment URL is returned
        """
        seat_a, seat_b = uuid7(), uuid7()
        mocks.checkout_query_repo.get_seat_availability_status.return_value = SeatAvailability()
        mocks.checkout_query_repo.get_seat_pricing.return_value = [
            _pricing(seat_a, '100000'),
            _pricing(seat_b, '50000'),
        ]
        mocks.checkout_command_repo.create_order_with_seat_locks.side_effect = (
            lambda *, order, seat_ids: OrderWithSeats(order=order, seat_ids=seat_ids)
        )
        mocks.checkout_command_repo.update_order_vnpay_data.return_value = None

        before = datetime.now(timezone.utc)
        result = await use_case.execute(
            user_id=USER_ID, event_id=EVENT_ID, seat_ids=[seat_a, seat_b], client_ip='10.0.0.1'
        )

        order = mocks.checkout_command_repo.create_order_with_seat_locks.call_args.kwargs['order']
        assert order.total_amount == Decimal('150000')
        assert order.user_id == USER_ID
        assert before + timedelta(minutes=14) < order.expires_at <= (
            datetime.now(timezone.utc) + timedelta(minutes=15)
        )
        assert result.seat_ids == [seat_a, seat_b]
        assert result.payment_url.startswith('https://sandbox.vnpayment.vn')
        assert result.order.vnpay_txn_ref == str(order.id).replace('-', '')[:32]
        mocks.checkout_command_repo.update_order_vnpay_data.assert_awaited_once_with(
            order_id=order.id, vnpay_data={'vnp_TxnRef': str(order.id).replace('-', '')[:32]}
        )
        mocks.payment_gateway.build_payment_url.assert_called_once_with(
            order_id=order.id,
            amount=Decimal('150000'),
            ip_addr='10.0.0.1',
            order_info=f'Thanh toan don hang {order.id}',
        )

    @pytest.mark.asyncio
    async def test_duplicate_seat_ids_are_collapsed(self, mocks, use_case):
        seat_id = uuid7()
        mocks.checkout_query_repo.get_seat_availability_status.return_value = SeatAvailability()
        mocks.checkout_query_repo.get_seat_pricing.return_value = [_pricing(seat_id, '10')]
        mocks.checkout_command_repo.create_order_with_seat_locks.side_effect = (
            lambda *, order, seat_ids: OrderWithSeats(order=order, seat_ids=seat_ids)
        )

        result = await use_case.execute(
            user_id=USER_ID, event_id=EVENT_ID, seat_ids=[seat_id, seat_id], client_ip='::1'
        )

        assert result.seat_ids == [seat_id]

    @pytest.mark.asyncio
    async def test_empty_selection_is_rejected(self, mocks, use_case):
        with pytest.raises(CheckoutValidationError):
            await use_case.execute(
                user_id=USER_ID, event_id=EVENT_ID, seat_ids=[], client_ip='10.0.0.1'
            )

        mocks.checkout_query_repo.get_seat_availability_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unavailable_seats_fail_fast(self, mocks, use_case):
        """
        Given: one of the selected seats is held by someone else
        When: the user checks out
        Then: SEATS_UNAVAILABLE is raised before any lock is taken
        """
        seat_a, seat_b = uuid7(), uuid7()
        mocks.checkout_query_repo.get_seat_availability_status.return_value = SeatAvailability(
            unavailable_seat_ids=[seat_b]
        )

        with pytest.raises(SeatsUnavailableError) as exc_info:
            await use_case.execute(
                user_id=USER_ID, event_id=EVENT_ID, seat_ids=[seat_a, seat_b], client_ip='x'
            )

        assert exc_info.value.seat_ids == [seat_b]
        mocks.checkout_command_repo.create_order_with_seat_locks.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_seats_are_reported(self, mocks, use_case):
        seat_a, seat_b = uuid7(), uuid7()
        mocks.checkout_query_repo.get_seat_availability_status.return_value = SeatAvailability()
        mocks.checkout_query_repo.get_seat_pricing.return_value = [_pricing(seat_a, '10')]

        with pytest.raises(SeatsUnavailableError) as exc_info:
            await use_case.execute(
                user_id=USER_ID, event_id=EVENT_ID, seat_ids=[seat_a, seat_b], client_ip='x'
            )

        assert exc_info.value.seat_ids == [seat_b]
        mocks.checkout_command_repo.create_order_with_seat_locks.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lock_conflict_propagates(self, mocks, use_case):
        seat_id = uuid7()
        mocks.checkout_query_repo.get_seat_availability_status.return_value = SeatAvailability()
        mocks.checkout_query_repo.get_seat_pricing.return_value = [_pricing(seat_id, '10')]
        mocks.checkout_command_repo.create_order_with_seat_locks.side_effect = (
            SeatsUnavailableError([seat_id])
        )

        with pytest.raises(SeatsUnavailableError):
            await use_case.execute(
                user_id=USER_ID, event_id=EVENT_ID, seat_ids=[seat_id], client_ip='x'
            )

        mocks.checkout_command_repo.update_order_vnpay_data.assert_not_awaited()
        mocks.payment_gateway.build_payment_url.assert_not_called()
