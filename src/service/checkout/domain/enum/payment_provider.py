from enum import StrEnum


class PaymentProvider(StrEnum):
    VNPAY = 'vnpay'
