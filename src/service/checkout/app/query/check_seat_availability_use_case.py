from typing import List, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_checkout_query_repo import ICheckoutQueryRepo
from src.service.checkout.domain.value_object.seat_snapshot import SeatAvailability


class CheckSeatAvailabilityUseCase:
    """Advisory read: a seat reported free here can still be lost to a concurrent reservation."""

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
    async def execute(self, *, seat_ids: List[UUID]) -> SeatAvailability:
        return await self.checkout_query_repo.get_seat_availability_status(seat_ids=seat_ids)
