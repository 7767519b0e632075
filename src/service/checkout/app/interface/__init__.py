"""Application layer interfaces (Ports)"""

from src.service.checkout.app.interface.i_checkout_command_repo import ICheckoutCommandRepo
from src.service.checkout.app.interface.i_checkout_query_repo import ICheckoutQueryRepo
from src.service.checkout.app.interface.i_payment_gateway import IPaymentGateway

__all__ = ['ICheckoutCommandRepo', 'ICheckoutQueryRepo', 'IPaymentGateway']
