from decimal import Decimal

import attrs


@attrs.define(frozen=True)
class VnpayReturn:
    """Result of verifying the query string VNPay redirects back with."""

    is_verified: bool
    is_success: bool
    txn_ref: str
    amount: Decimal
    response_code: str
    transaction_no: str = ''
    bank_code: str = ''
