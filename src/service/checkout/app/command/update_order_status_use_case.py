from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_checkout_command_repo import ICheckoutCommandRepo
from src.service.checkout.domain.checkout_errors import OrderNotFoundError
from src.service.checkout.domain.entity.order_entity import Order
from src.service.checkout.domain.enum.order_status import OrderStatus


class UpdateOrderStatusUseCase:
    def __init__(self, *, checkout_command_repo: ICheckoutCommandRepo) -> None:
        self.checkout_command_repo = checkout_command_repo

    @classmethod
    @inject
    def depends(
        cls,
        checkout_command_repo: ICheckoutCommandRepo = Depends(
            Provide[Container.checkout_command_repo]
        ),
    ) -> Self:
        return cls(checkout_command_repo=checkout_command_repo)

    @Logger.io
    async def execute(self, *, order_id: UUID, status: OrderStatus) -> Order:
        order = await self.checkout_command_repo.update_order_status(
            order_id=order_id, status=status
        )
        if order is None:
            raise OrderNotFoundError(order_id)
        return order
