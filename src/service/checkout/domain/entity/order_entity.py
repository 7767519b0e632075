from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.logging.loguru_io import Logger
from src.service.checkout.domain.checkout_errors import CheckoutValidationError
from src.service.checkout.domain.enum.order_status import PAYABLE_ORDER_STATUSES, OrderStatus
from src.service.checkout.domain.enum.payment_provider import PaymentProvider


@attrs.define
class Order:
    id: UUID
    user_id: str
    event_id: UUID
    total_amount: Decimal
    status: OrderStatus = OrderStatus.PENDING
    showing_id: Optional[UUID] = None
    expires_at: Optional[datetime] = None
    payment_metadata: Optional[dict[str, Any]] = None
    order_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        user_id: str,
        event_id: UUID,
        expires_at: datetime,
        showing_id: Optional[UUID] = None,
        total_amount: Decimal = Decimal('0'),
        status: OrderStatus = OrderStatus.PENDING,
        id: Optional[UUID] = None,
    ) -> 'Order':
        if not user_id:
            raise CheckoutValidationError('user_id is required')
        if total_amount < 0:
            raise CheckoutValidationError('total_amount must not be negative')
        if expires_at.tzinfo is None:
            raise CheckoutValidationError('expires_at must be timezone-aware')
        if status not in PAYABLE_ORDER_STATUSES:
            raise CheckoutValidationError('A new order must start as pending or pending_payment')

        now = datetime.now(timezone.utc)
        return cls(
            id=id or uuid7(),
            user_id=user_id,
            event_id=event_id,
            showing_id=showing_id,
            total_amount=total_amount,
            status=status,
            expires_at=expires_at,
            order_date=now,
            updated_at=now,
        )

    @property
    def is_payable(self) -> bool:
        return self.status in PAYABLE_ORDER_STATUSES

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or datetime.now(timezone.utc))

    @property
    def vnpay_txn_ref(self) -> Optional[str]:
        metadata = self.payment_metadata or {}
        if metadata.get('provider') != PaymentProvider.VNPAY:
            return None
        return (metadata.get('data') or {}).get('vnp_TxnRef')

    def with_total(self, total_amount: Decimal) -> 'Order':
        return attrs.evolve(self, total_amount=total_amount)

    def with_status(self, status: OrderStatus, now: Optional[datetime] = None) -> 'Order':
        return attrs.evolve(self, status=status, updated_at=now or datetime.now(timezone.utc))

    def with_vnpay_data(self, vnpay_data: dict[str, Any]) -> 'Order':
        return attrs.evolve(
            self,
            payment_metadata={'provider': PaymentProvider.VNPAY.value, 'data': vnpay_data},
            updated_at=datetime.now(timezone.utc),
        )

    @Logger.io
    def mark_as_paid(self, now: Optional[datetime] = None) -> 'Order':
        if not self.is_payable:
            raise CheckoutValidationError(f'Order in status {self.status} cannot be paid')
        return self.with_status(OrderStatus.PAID, now)

    @Logger.io
    def mark_as_expired(self, now: Optional[datetime] = None) -> 'Order':
        return self.with_status(OrderStatus.EXPIRED, now)
