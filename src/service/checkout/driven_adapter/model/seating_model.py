from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class AreaModel(Base):
    """Priced section; `showing_id` is null for event-level (GA-only) areas."""

    __tablename__ = 'areas'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    event_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey('events.id', ondelete='CASCADE'), nullable=False, index=True
    )
    showing_id: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey('showings.id', ondelete='CASCADE'),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)


class RowModel(Base):
    __tablename__ = 'rows'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    area_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey('areas.id', ondelete='CASCADE'), nullable=False, index=True
    )
    row_name: Mapped[str] = mapped_column(String(50), nullable=False)


class SeatModel(Base):
    __tablename__ = 'seats'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    row_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey('rows.id', ondelete='CASCADE'), nullable=False, index=True
    )
    seat_number: Mapped[str] = mapped_column(String(20), nullable=False)
