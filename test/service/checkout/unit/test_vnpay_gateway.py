"""
Unit tests for VnpayGatewayImpl

Focus:
1. Payment URL carries the VNPay 2.1.0 fields and a valid HMAC-SHA512 signature
2. Return verification: signature, success code and amount decoding
"""

from datetime import datetime
from decimal import Decimal
import hashlib
import hmac
from urllib.parse import parse_qsl, urlencode, urlsplit
from uuid import UUID

import pytest

from src.service.checkout.driven_adapter.payment.vnpay_gateway_impl import VnpayGatewayImpl


SECRET = 'unit_test_secret'
ORDER_ID = UUID('01936d8f-5e73-7c4e-a9c5-123456789abc')


def _sign(params: dict[str, str]) -> str:
    query = urlencode(sorted(params.items()))
    return hmac.new(SECRET.encode(), query.encode(), hashlib.sha512).hexdigest()


@pytest.fixture
def gateway() -> VnpayGatewayImpl:
    return VnpayGatewayImpl(
        tmn_code='TESTTMN',
        hash_secret=SECRET,
        payment_url='https://sandbox.vnpayment.vn/paymentv2/vpcpay.html',
        return_url='http://localhost:8000/api/checkout/vnpay/return',
        ttl_seconds=900,
        locale='vn',
    )


def _callback_params(**overrides: str) -> dict[str, str]:
    params = {
        'vnp_Amount': '20000000',
        'vnp_BankCode': 'NCB',
        'vnp_ResponseCode': '00',
        'vnp_TmnCode': 'TESTTMN',
        'vnp_TransactionNo': '14422574',
        'vnp_TxnRef': '01936d8f5e737c4ea9c5123456789abc',
        'vnp_OrderInfo': 'Thanh toan don hang',
    }
    params.update(overrides)
    params['vnp_SecureHash'] = _sign(params)
    return params


class TestBuildPaymentUrl:
    def test_txn_ref_is_order_id_without_dashes(self, gateway):
        assert gateway.build_txn_ref(order_id=ORDER_ID) == '01936d8f5e737c4ea9c5123456789abc'

    def test_url_contains_signed_vnpay_fields(self, gateway):
        url = gateway.build_payment_url(
            order_id=ORDER_ID,
            amount=Decimal('200000'),
            ip_addr='10.0.0.1',
            order_info='Thanh toan don hang',
        )

        parts = urlsplit(url)
        params = dict(parse_qsl(parts.query))
        secure_hash = params.pop('vnp_SecureHash')

        assert f'{parts.scheme}://{parts.netloc}{parts.path}' == (
            'https://sandbox.vnpayment.vn/paymentv2/vpcpay.html'
        )
        assert params['vnp_Version'] == '2.1.0'
        assert params['vnp_Command'] == 'pay'
        assert params['vnp_Amount'] == '20000000'
        assert params['vnp_CurrCode'] == 'VND'
        assert params['vnp_TxnRef'] == '01936d8f5e737c4ea9c5123456789abc'
        assert params['vnp_IpAddr'] == '10.0.0.1'
        assert secure_hash == _sign(params)

    def test_expire_date_is_ttl_after_create_date(self, gateway):
        url = gateway.build_payment_url(
            order_id=ORDER_ID, amount=Decimal('1000'), ip_addr='10.0.0.1', order_info='x'
        )
        params = dict(parse_qsl(urlsplit(url).query))

        created = datetime.strptime(params['vnp_CreateDate'], '%Y%m%d%H%M%S')
        expires = datetime.strptime(params['vnp_ExpireDate'], '%Y%m%d%H%M%S')

        assert (expires - created).total_seconds() == 900

    def test_ipv6_loopback_is_mapped(self, gateway):
        url = gateway.build_payment_url(
            order_id=ORDER_ID, amount=Decimal('1000'), ip_addr='::1', order_info='x'
        )

        assert dict(parse_qsl(urlsplit(url).query))['vnp_IpAddr'] == '127.0.0.1'


class TestVerifyReturn:
    def test_valid_success_callback(self, gateway):
        result = gateway.verify_return(params=_callback_params())

        assert result.is_verified
        assert result.is_success
        assert result.amount == Decimal('200000')
        assert result.txn_ref == '01936d8f5e737c4ea9c5123456789abc'
        assert result.transaction_no == '14422574'
        assert result.bank_code == 'NCB'

    def test_valid_failure_callback(self, gateway):
        result = gateway.verify_return(params=_callback_params(vnp_ResponseCode='24'))

        assert result.is_verified
        assert not result.is_success
        assert result.response_code == '24'

    def test_tampered_amount_fails_verification(self, gateway):
        params = _callback_params()
        params['vnp_Amount'] = '100'

        result = gateway.verify_return(params=params)

        assert not result.is_verified
        assert not result.is_success

    def test_hash_type_is_excluded_from_signature(self, gateway):
        params = _callback_params()
        params['vnp_SecureHashType'] = 'HmacSHA512'

        assert gateway.verify_return(params=params).is_verified

    def test_missing_signature_is_rejected(self, gateway):
        params = _callback_params()
        del params['vnp_SecureHash']

        assert not gateway.verify_return(params=params).is_verified
