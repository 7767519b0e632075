"""
Unit tests for ConfirmPaymentUseCase

Focus:
1. Reject: bad signature, unknown txn ref, another user's order
2. FAILED transitions: gateway failure and amount mismatch, only from a payable status
3. Idempotency: a PAID order returns its tickets without a new transaction
4. Happy path: payment transaction runs with seats derived from the order's holds
"""

from decimal import Decimal

import pytest

from src.service.checkout.app.command.confirm_payment_use_case import ConfirmPaymentUseCase
from src.service.checkout.domain.checkout_errors import (
    AmountMismatchError,
    OrderExpiredError,
    OrderNotFoundError,
    OrderUserMismatchError,
    PaymentFailedError,
    PaymentVerificationError,
)
from src.service.checkout.domain.enum.order_status import PAYABLE_ORDER_STATUSES, OrderStatus
from src.service.checkout.domain.value_object.checkout_result import PaymentResult
from src.service.checkout.domain.value_object.vnpay_return import VnpayReturn
from test.service.checkout.unit.helpers import (
    OTHER_USER_ID,
    USER_ID,
    RepositoryMocks,
    make_order,
    make_ticket_detail,
)


TXN_REF = 'abc123'
PARAMS = {'vnp_TxnRef': TXN_REF, 'vnp_SecureHash': 'ignored-by-mock'}


def _vnpay_return(
    *, verified: bool = True, success: bool = True, amount: str = '200000.00', code: str = '00'
) -> VnpayReturn:
    return VnpayReturn(
        is_verified=verified,
        is_success=verified and success,
        txn_ref=TXN_REF,
        amount=Decimal(amount),
        response_code=code,
    )


class TestConfirmPayment:
    @pytest.fixture
    def mocks(self):
        return RepositoryMocks()

    @pytest.fixture
    def use_case(self, mocks):
        return ConfirmPaymentUseCase(
            checkout_query_repo=mocks.checkout_query_repo,
            checkout_command_repo=mocks.checkout_command_repo,
            payment_gateway=mocks.payment_gateway,
        )

    @pytest.mark.asyncio
    async def test_successful_payment_issues_tickets(self, mocks, use_case):
        """
        Given: a pending order of 200000 and a verified success callback for 200000
        When: the callback is processed
        Then:
          - the payment transaction runs for the order's owner with no explicit ticket data
          - ticket details are returned with the paid order
        """
        order = make_order(txn_ref=TXN_REF)
        tickets = [make_ticket_detail(seat_number='1'), make_ticket_detail(seat_number='2')]
        mocks.payment_gateway.verify_return.return_value = _vnpay_return()
        mocks.checkout_query_repo.get_order_by_vnpay_txn_ref.return_value = order
        mocks.checkout_command_repo.execute_payment_transaction.return_value = PaymentResult(
            order=order.mark_as_paid(), tickets=[], seat_count=2
        )
        mocks.checkout_query_repo.get_ticket_details.return_value = tickets

        result = await use_case.execute(params=PARAMS, user_id=USER_ID)

        assert result.order.status == OrderStatus.PAID
        assert result.tickets == tickets
        mocks.checkout_command_repo.execute_payment_transaction.assert_awaited_once_with(
            order_id=order.id, user_id=USER_ID, ticket_data=[]
        )
        mocks.checkout_command_repo.update_order_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_signature(self, mocks, use_case):
        mocks.payment_gateway.verify_return.return_value = _vnpay_return(verified=False)

        with pytest.raises(PaymentVerificationError):
            await use_case.execute(params=PARAMS, user_id=USER_ID)

        mocks.checkout_query_repo.get_order_by_vnpay_txn_ref.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_transaction_reference(self, mocks, use_case):
        mocks.payment_gateway.verify_return.return_value = _vnpay_return()
        mocks.checkout_query_repo.get_order_by_vnpay_txn_ref.return_value = None

        with pytest.raises(OrderNotFoundError):
            await use_case.execute(params=PARAMS, user_id=USER_ID)

    @pytest.mark.asyncio
    async def test_other_users_order_is_rejected(self, mocks, use_case):
        mocks.payment_gateway.verify_return.return_value = _vnpay_return()
        mocks.checkout_query_repo.get_order_by_vnpay_txn_ref.return_value = make_order(
            user_id=OTHER_USER_ID
        )

        with pytest.raises(OrderUserMismatchError):
            await use_case.execute(params=PARAMS, user_id=USER_ID)

        mocks.checkout_command_repo.update_order_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_gateway_failure_marks_order_failed(self, mocks, use_case):
        """
        Given: the customer cancelled at the gateway (response code 24)
        When: the callback is processed
        Then: the order becomes FAILED and PAYMENT_FAILED carries the code
        """
        order = make_order()
        mocks.payment_gateway.verify_return.return_value = _vnpay_return(success=False, code='24')
        mocks.checkout_query_repo.get_order_by_vnpay_txn_ref.return_value = order

        with pytest.raises(PaymentFailedError) as exc_info:
            await use_case.execute(params=PARAMS, user_id=USER_ID)

        assert exc_info.value.response_code == '24'
        mocks.checkout_command_repo.update_order_status.assert_awaited_once_with(
            order_id=order.id, status=OrderStatus.FAILED, from_statuses=PAYABLE_ORDER_STATUSES
        )
        mocks.checkout_command_repo.execute_payment_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_amount_mismatch_marks_order_failed(self, mocks, use_case):
        order = make_order(total_amount=Decimal('200000.00'))
        mocks.payment_gateway.verify_return.return_value = _vnpay_return(amount='199999.00')
        mocks.checkout_query_repo.get_order_by_vnpay_txn_ref.return_value = order

        with pytest.raises(AmountMismatchError):
            await use_case.execute(params=PARAMS, user_id=USER_ID)

        mocks.checkout_command_repo.update_order_status.assert_awaited_once_with(
            order_id=order.id, status=OrderStatus.FAILED, from_statuses=PAYABLE_ORDER_STATUSES
        )

    @pytest.mark.asyncio
    async def test_amount_within_tolerance_is_accepted(self, mocks, use_case):
        order = make_order(total_amount=Decimal('200000.00'))
        mocks.payment_gateway.verify_return.return_value = _vnpay_return(amount='200000.01')
        mocks.checkout_query_repo.get_order_by_vnpay_txn_ref.return_value = order
        mocks.checkout_command_repo.execute_payment_transaction.return_value = PaymentResult(
            order=order.mark_as_paid(), tickets=[], seat_count=1
        )
        mocks.checkout_query_repo.get_ticket_details.return_value = []

        result = await use_case.execute(params=PARAMS, user_id=USER_ID)

        assert result.order.status == OrderStatus.PAID

    @pytest.mark.asyncio
    async def test_duplicate_callback_returns_existing_tickets(self, mocks, use_case):
        """
        Given: the order is already PAID
        When: the same callback arrives again
        Then: existing tickets are returned and no payment transaction runs
        """
        order = make_order(status=OrderStatus.PAID)
        tickets = [make_ticket_detail()]
        mocks.payment_gateway.verify_return.return_value = _vnpay_return()
        mocks.checkout_query_repo.get_order_by_vnpay_txn_ref.return_value = order
        mocks.checkout_query_repo.get_ticket_details.return_value = tickets

        result = await use_case.execute(params=PARAMS, user_id=USER_ID)

        assert result.tickets == tickets
        assert result.order is order
        mocks.checkout_command_repo.execute_payment_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_order_error_propagates(self, mocks, use_case):
        order = make_order()
        mocks.payment_gateway.verify_return.return_value = _vnpay_return()
        mocks.checkout_query_repo.get_order_by_vnpay_txn_ref.return_value = order
        mocks.checkout_command_repo.execute_payment_transaction.side_effect = OrderExpiredError(
            order.id
        )

        with pytest.raises(OrderExpiredError):
            await use_case.execute(params=PARAMS, user_id=USER_ID)

        mocks.checkout_query_repo.get_ticket_details.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'vnpay_return',
        [_vnpay_return(success=False, code='24'), _vnpay_return(amount='1.00')],
        ids=['gateway_failure', 'amount_mismatch'],
    )
    async def test_failed_callback_keeps_paid_order_paid(self, mocks, use_case, vnpay_return):
        """
        Given: the order is already PAID with issued tickets
        When: a signed callback for the same txn ref reports a failure or a wrong amount
        Then: the existing tickets are returned and the status is never rewritten
        """
        order = make_order(status=OrderStatus.PAID)
        tickets = [make_ticket_detail()]
        mocks.payment_gateway.verify_return.return_value = vnpay_return
        mocks.checkout_query_repo.get_order_by_vnpay_txn_ref.return_value = order
        mocks.checkout_query_repo.get_ticket_details.return_value = tickets

        result = await use_case.execute(params=PARAMS, user_id=USER_ID)

        assert result.order.status == OrderStatus.PAID
        assert result.tickets == tickets
        mocks.checkout_command_repo.update_order_status.assert_not_awaited()
        mocks.checkout_command_repo.execute_payment_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_callback_keeps_expired_order_expired(self, mocks, use_case):
        order = make_order(status=OrderStatus.EXPIRED)
        mocks.payment_gateway.verify_return.return_value = _vnpay_return(success=False, code='24')
        mocks.checkout_query_repo.get_order_by_vnpay_txn_ref.return_value = order

        with pytest.raises(PaymentFailedError):
            await use_case.execute(params=PARAMS, user_id=USER_ID)

        mocks.checkout_command_repo.update_order_status.assert_not_awaited()
