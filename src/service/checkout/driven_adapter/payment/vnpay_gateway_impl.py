"""
VNPay payment gateway (API 2.1.0)

Signing: every vnp_* parameter except the hash itself, sorted by key, form
encoded, then HMAC-SHA512 with the merchant hash secret (hex digest).
"""

import hashlib
import hmac
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Mapping
from urllib.parse import urlencode
from uuid import UUID
from zoneinfo import ZoneInfo

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_payment_gateway import IPaymentGateway
from src.service.checkout.domain.value_object.vnpay_return import VnpayReturn


VNPAY_VERSION = '2.1.0'
VNPAY_COMMAND = 'pay'
VNPAY_CURRENCY = 'VND'
VNPAY_ORDER_TYPE = '190000'  # entertainment & training
VNPAY_TIMEZONE = ZoneInfo('Asia/Ho_Chi_Minh')
VNPAY_DATE_FORMAT = '%Y%m%d%H%M%S'
VNPAY_SUCCESS_CODE = '00'

_HASH_PARAMS = ('vnp_SecureHash', 'vnp_SecureHashType')


def _sign(secret: str, params: Mapping[str, str]) -> str:
    query = urlencode(sorted(params.items()))
    return hmac.new(secret.encode('utf-8'), query.encode('utf-8'), hashlib.sha512).hexdigest()


class VnpayGatewayImpl(IPaymentGateway):
    def __init__(
        self,
        *,
        tmn_code: str | None = None,
        hash_secret: str | None = None,
        payment_url: str | None = None,
        return_url: str | None = None,
        ttl_seconds: int | None = None,
        locale: str | None = None,
    ) -> None:
        self.tmn_code = tmn_code if tmn_code is not None else settings.VNPAY_TMN_CODE
        self.hash_secret = (
            hash_secret
            if hash_secret is not None
            else settings.VNPAY_HASH_SECRET.get_secret_value()
        )
        self.payment_url = payment_url or settings.VNPAY_PAYMENT_URL
        self.return_url = return_url or settings.VNPAY_RETURN_URL
        self.ttl_seconds = ttl_seconds or settings.VNPAY_PAYMENT_TTL_SECONDS
        self.locale = locale or settings.VNPAY_LOCALE

    def build_txn_ref(self, *, order_id: UUID) -> str:
        return str(order_id).replace('-', '')[:32]

    @Logger.io
    def build_payment_url(
        self, *, order_id: UUID, amount: Decimal, ip_addr: str, order_info: str
    ) -> str:
        created_at = datetime.now(VNPAY_TIMEZONE)
        expires_at = created_at + timedelta(seconds=self.ttl_seconds)

        params = {
            'vnp_Version': VNPAY_VERSION,
            'vnp_Command': VNPAY_COMMAND,
            'vnp_TmnCode': self.tmn_code,
            'vnp_Amount': str(int((amount * 100).to_integral_value())),
            'vnp_CurrCode': VNPAY_CURRENCY,
            'vnp_TxnRef': self.build_txn_ref(order_id=order_id),
            'vnp_OrderInfo': order_info,
            'vnp_OrderType': VNPAY_ORDER_TYPE,
            'vnp_Locale': self.locale,
            'vnp_ReturnUrl': self.return_url,
            'vnp_IpAddr': '127.0.0.1' if ip_addr == '::1' else ip_addr,
            'vnp_CreateDate': created_at.strftime(VNPAY_DATE_FORMAT),
            'vnp_ExpireDate': expires_at.strftime(VNPAY_DATE_FORMAT),
        }
        secure_hash = _sign(self.hash_secret, params)
        query = urlencode(sorted(params.items()))
        return f'{self.payment_url}?{query}&vnp_SecureHash={secure_hash}'

    @Logger.io
    def verify_return(self, *, params: Mapping[str, str]) -> VnpayReturn:
        received_hash = params.get('vnp_SecureHash', '')
        signed_params = {
            key: value
            for key, value in params.items()
            if key.startswith('vnp_') and key not in _HASH_PARAMS
        }
        expected_hash = _sign(self.hash_secret, signed_params)
        is_verified = bool(received_hash) and hmac.compare_digest(
            expected_hash.encode('utf-8'), received_hash.lower().encode('utf-8')
        )

        response_code = params.get('vnp_ResponseCode', '')
        try:
            amount = Decimal(params.get('vnp_Amount', '0')) / 100
        except InvalidOperation:
            amount = Decimal('0')

        if not is_verified:
            Logger.base.warning(
                f'🔏 [VNPAY] Signature mismatch for txn {params.get("vnp_TxnRef", "")}'
            )

        return VnpayReturn(
            is_verified=is_verified,
            is_success=is_verified and response_code == VNPAY_SUCCESS_CODE,
            txn_ref=params.get('vnp_TxnRef', ''),
            amount=amount,
            response_code=response_code,
            transaction_no=params.get('vnp_TransactionNo', ''),
            bank_code=params.get('vnp_BankCode', ''),
        )
