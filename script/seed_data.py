#!/usr/bin/env python3
"""
Database Seed Script
Populate a demo venue for local checkout testing

Features:
1. Create Event - one event with one evening showing
2. Create Seat Map - priced areas bound to the showing, each with rows of seats
3. Create GA Area - an event-level general-admission area (no showing)

Notes:
- Run `python -m script.reset_database` first for an empty schema
- SEATS_PER_ROW overrides the row width (default 10)
"""

import asyncio
from decimal import Decimal
import os

from sqlalchemy import func, select
from uuid_utils.compat import uuid7

from src.platform.database.orm_db_setting import dispose_engine, get_session_maker
from src.service.checkout.driven_adapter.model import (
    AreaModel,
    EventModel,
    RowModel,
    SeatModel,
    ShowingModel,
)


SEATING_CONFIG = {
    'sections': [
        {'name': 'VIP', 'price': Decimal('1500000'), 'rows': ['A', 'B']},
        {'name': 'Standard', 'price': Decimal('800000'), 'rows': ['C', 'D', 'E']},
    ],
    'general_admission': {'name': 'Standing', 'price': Decimal('300000'), 'capacity': 50},
}


async def _create_area(session, *, event_id, showing_id, name, price, rows, seats_per_row):
    area = AreaModel(id=uuid7(), event_id=event_id, showing_id=showing_id, name=name, price=price)
    session.add(area)
    await session.flush()

    for row_name in rows:
        row = RowModel(id=uuid7(), area_id=area.id, row_name=row_name)
        session.add(row)
        await session.flush()
        session.add_all(
            [
                SeatModel(id=uuid7(), row_id=row.id, seat_number=str(number))
                for number in range(1, seats_per_row + 1)
            ]
        )
    await session.flush()
    print(f'   ✅ Area {name}: ID={area.id}, price={price}')
    return area.id


async def _seed_data() -> None:
    seats_per_row = int(os.getenv('SEATS_PER_ROW', '10'))

    async with get_session_maker()() as session:
        async with session.begin():
            event = EventModel(id=uuid7(), name='Concert Event')
            session.add(event)
            await session.flush()
            showing = ShowingModel(id=uuid7(), event_id=event.id, name='Evening show')
            session.add(showing)
            await session.flush()
            print(f'🎫 Event ID={event.id}, Showing ID={showing.id}')

            for section in SEATING_CONFIG['sections']:
                await _create_area(
                    session,
                    event_id=event.id,
                    showing_id=showing.id,
                    name=section['name'],
                    price=section['price'],
                    rows=section['rows'],
                    seats_per_row=seats_per_row,
                )

            ga = SEATING_CONFIG['general_admission']
            await _create_area(
                session,
                event_id=event.id,
                showing_id=None,
                name=ga['name'],
                price=ga['price'],
                rows=['GA'],
                seats_per_row=ga['capacity'],
            )


async def verify_data() -> None:
    print('🔍 Verifying seeded data...')
    async with get_session_maker()() as session:
        for model in (EventModel, ShowingModel, AreaModel, RowModel, SeatModel):
            count = (await session.execute(select(func.count()).select_from(model))).scalar()
            print(f'   {model.__tablename__}: {count}')


async def main() -> None:
    print('🌱 Starting data seeding...')
    print('=' * 50)

    try:
        await _seed_data()
        await verify_data()
        print('=' * 50)
        print('🌱 Data seeding completed!')
    finally:
        await dispose_engine()


if __name__ == '__main__':
    asyncio.run(main())
