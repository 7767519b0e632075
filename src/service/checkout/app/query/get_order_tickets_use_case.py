from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_checkout_query_repo import ICheckoutQueryRepo
from src.service.checkout.domain.checkout_errors import OrderNotFoundError
from src.service.checkout.domain.value_object.checkout_result import OrderTickets


class GetOrderTicketsUseCase:
    def __init__(self, checkout_query_repo: ICheckoutQueryRepo) -> None:
        self.checkout_query_repo = checkout_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        checkout_query_repo: ICheckoutQueryRepo = Depends(Provide[Container.checkout_query_repo]),
    ) -> Self:
        return cls(checkout_query_repo=checkout_query_repo)

    @Logger.io
    async def execute(self, *, order_id: UUID, user_id: str) -> OrderTickets:
        # Another user's order is reported as missing, not forbidden
        order = await self.checkout_query_repo.get_order_by_id_for_user(
            order_id=order_id, user_id=user_id
        )
        if order is None:
            raise OrderNotFoundError(order_id)

        tickets = await self.checkout_query_repo.get_ticket_details(order_id=order_id)
        return OrderTickets(order=order, tickets=tickets)
