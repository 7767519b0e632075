from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Mapping
from uuid import UUID

from src.service.checkout.domain.value_object.vnpay_return import VnpayReturn


class IPaymentGateway(ABC):
    @abstractmethod
    def build_txn_ref(self, *, order_id: UUID) -> str:
        pass

    @abstractmethod
    def build_payment_url(
        self, *, order_id: UUID, amount: Decimal, ip_addr: str, order_info: str
    ) -> str:
        """
        Signed redirect URL for the customer's browser

        Args:
            order_id: Order being paid (becomes the transaction reference)
            amount: Order total in VND
            ip_addr: Customer IP address
            order_info: Free-text description shown by the gateway

        Returns:
            Payment URL
        """
        pass

    @abstractmethod
    def verify_return(self, *, params: Mapping[str, str]) -> VnpayReturn:
        """Check the signature of the gateway's return query and decode its outcome"""
        pass
