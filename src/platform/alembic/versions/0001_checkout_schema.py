"""checkout_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Schema:
- events / showings: what is being sold and when
- areas -> rows -> seats: venue layout; areas carry the price
- orders: one checkout attempt, VNPay reference in payment_metadata
- seat_holds: time-boxed claims on seats for an order
- tickets: issued on payment; at most one active/used ticket per seat
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at(name: str) -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False
    )


def upgrade() -> None:
    """Create the checkout tables."""

    # ========== Catalog ==========

    op.create_table(
        'events',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        _created_at('created_at'),
        sa.PrimaryKeyConstraint('id', name='pk_events'),
    )

    op.create_table(
        'showings',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('event_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ['event_id'], ['events.id'], name='fk_showings_event_id_events', ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_showings'),
    )
    op.create_index('ix_showings_event_id', 'showings', ['event_id'])

    # ========== Venue layout ==========

    op.create_table(
        'areas',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('event_id', UUID(as_uuid=True), nullable=False),
        sa.Column('showing_id', UUID(as_uuid=True), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.ForeignKeyConstraint(
            ['event_id'], ['events.id'], name='fk_areas_event_id_events', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['showing_id'],
            ['showings.id'],
            name='fk_areas_showing_id_showings',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_areas'),
    )
    op.create_index('ix_areas_event_id', 'areas', ['event_id'])
    op.create_index('ix_areas_showing_id', 'areas', ['showing_id'])

    op.create_table(
        'rows',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('area_id', UUID(as_uuid=True), nullable=False),
        sa.Column('row_name', sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(
            ['area_id'], ['areas.id'], name='fk_rows_area_id_areas', ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_rows'),
    )
    op.create_index('ix_rows_area_id', 'rows', ['area_id'])

    op.create_table(
        'seats',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('row_id', UUID(as_uuid=True), nullable=False),
        sa.Column('seat_number', sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(
            ['row_id'], ['rows.id'], name='fk_seats_row_id_rows', ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_seats'),
    )
    op.create_index('ix_seats_row_id', 'seats', ['row_id'])

    # ========== Checkout ==========

    op.create_table(
        'orders',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('event_id', UUID(as_uuid=True), nullable=False),
        sa.Column('showing_id', UUID(as_uuid=True), nullable=True),
        _created_at('order_date'),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('payment_metadata', JSONB(), nullable=True),
        _created_at('updated_at'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], name='fk_orders_event_id_events'),
        sa.ForeignKeyConstraint(
            ['showing_id'], ['showings.id'], name='fk_orders_showing_id_showings'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_orders'),
    )
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_index('ix_orders_event_id', 'orders', ['event_id'])
    op.create_index('ix_orders_showing_id', 'orders', ['showing_id'])
    op.execute(
        "CREATE INDEX ix_orders_vnpay_txn_ref ON orders ((payment_metadata -> 'data' ->> 'vnp_TxnRef'))"
    )

    op.create_table(
        'seat_holds',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('event_id', UUID(as_uuid=True), nullable=False),
        sa.Column('showing_id', UUID(as_uuid=True), nullable=True),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('seat_id', UUID(as_uuid=True), nullable=False),
        sa.Column('is_confirmed', sa.Boolean(), nullable=False),
        sa.Column('is_paid', sa.Boolean(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        _created_at('created_at'),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'], name='fk_seat_holds_order_id_orders', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['seat_id'], ['seats.id'], name='fk_seat_holds_seat_id_seats'),
        sa.PrimaryKeyConstraint('id', name='pk_seat_holds'),
    )
    op.create_index('ix_seat_holds_event_id', 'seat_holds', ['event_id'])
    op.create_index('ix_seat_holds_showing_id', 'seat_holds', ['showing_id'])
    op.create_index('ix_seat_holds_user_id', 'seat_holds', ['user_id'])
    op.create_index('ix_seat_holds_order_id', 'seat_holds', ['order_id'])
    op.create_index('ix_seat_holds_seat_id', 'seat_holds', ['seat_id'])
    op.create_index('ix_seat_holds_expires_at', 'seat_holds', ['expires_at'])
    op.create_index(
        'ix_seat_holds_confirmed_expires', 'seat_holds', ['is_confirmed', 'expires_at']
    )

    op.create_table(
        'tickets',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('event_id', UUID(as_uuid=True), nullable=False),
        sa.Column('showing_id', UUID(as_uuid=True), nullable=True),
        sa.Column('seat_id', UUID(as_uuid=True), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        _created_at('purchased_at'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], name='fk_tickets_order_id_orders'),
        sa.ForeignKeyConstraint(['seat_id'], ['seats.id'], name='fk_tickets_seat_id_seats'),
        sa.PrimaryKeyConstraint('id', name='pk_tickets'),
    )
    op.create_index('ix_tickets_order_id', 'tickets', ['order_id'])
    op.create_index('ix_tickets_event_id', 'tickets', ['event_id'])
    op.create_index(
        'uq_tickets_live_seat',
        'tickets',
        ['seat_id'],
        unique=True,
        postgresql_where=sa.text("status IN ('active', 'used')"),
    )


def downgrade() -> None:
    """Drop the checkout tables."""
    op.drop_table('tickets')
    op.drop_table('seat_holds')
    op.execute('DROP INDEX IF EXISTS ix_orders_vnpay_txn_ref')
    op.drop_table('orders')
    op.drop_table('seats')
    op.drop_table('rows')
    op.drop_table('areas')
    op.drop_table('showings')
    op.drop_table('events')
