from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_checkout_query_repo import ICheckoutQueryRepo
from src.service.checkout.domain.value_object.seat_snapshot import SeatStatus


class GetSeatStatusUseCase:
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
    async def execute(self, *, event_id: UUID) -> SeatStatus:
        return await self.checkout_query_repo.get_seat_status(event_id=event_id)
