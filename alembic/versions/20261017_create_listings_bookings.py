"""Create listings, amenities and bookings tables

Revision ID: 3c1e9a7d5b20
Revises:
Create Date: 2026-10-17

Tables:
- listings: Bookable spaces with rates, booking bounds and operating window
- amenities: One row of facilities per listing
- bookings: Half-open reservations [start_time, end_time) on one date
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1e9a7d5b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _entity_columns() -> list:
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table('listings',
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('address', sa.String(length=300), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('state', sa.String(length=100), nullable=False),
        sa.Column('postal_code', sa.String(length=20), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('hourly_rate', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('daily_rate', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('weekly_rate', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('min_booking_hours', sa.Integer(), nullable=False),
        sa.Column('max_booking_hours', sa.Integer(), nullable=True),
        sa.Column('opening_time', sa.Time(), nullable=False),
        sa.Column('closing_time', sa.Time(), nullable=False),
        sa.Column('space_size_sqm', sa.Integer(), nullable=True),
        sa.Column('max_trucks', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        *_entity_columns(),
        sa.CheckConstraint('closing_time > opening_time', name='ck_listing_operating_window'),
        sa.CheckConstraint('min_booking_hours >= 1', name='ck_listing_min_hours'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('listings', schema=None) as batch_op:
        batch_op.create_index('idx_listing_status', ['status'], unique=False)
        batch_op.create_index('idx_listing_owner', ['owner_id'], unique=False)
        batch_op.create_index('idx_listing_city', ['city'], unique=False)
        batch_op.create_index('idx_listing_created', ['created_at'], unique=False)

    op.create_table('amenities',
        sa.Column('listing_id', sa.Uuid(), nullable=False),
        sa.Column('running_water', sa.Boolean(), nullable=False),
        sa.Column('electricity_type', sa.String(length=10), nullable=False),
        sa.Column('gas_supply', sa.Boolean(), nullable=False),
        sa.Column('shelter', sa.Boolean(), nullable=False),
        sa.Column('toilet_facilities', sa.Boolean(), nullable=False),
        sa.Column('wifi', sa.Boolean(), nullable=False),
        sa.Column('customer_seating', sa.Boolean(), nullable=False),
        sa.Column('waste_disposal', sa.Boolean(), nullable=False),
        sa.Column('overnight_parking', sa.Boolean(), nullable=False),
        sa.Column('security_cctv', sa.Boolean(), nullable=False),
        sa.Column('loading_dock', sa.Boolean(), nullable=False),
        sa.Column('refrigeration_access', sa.Boolean(), nullable=False),
        *_entity_columns(),
        sa.ForeignKeyConstraint(['listing_id'], ['listings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('listing_id'),
    )

    op.create_table('bookings',
        sa.Column('listing_id', sa.Uuid(), nullable=False),
        sa.Column('vendor_id', sa.Uuid(), nullable=False),
        sa.Column('booking_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('total_hours', sa.Numeric(precision=6, scale=2), nullable=False),
        sa.Column('total_cost', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('vendor_notes', sa.Text(), nullable=True),
        sa.Column('venue_owner_notes', sa.Text(), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        *_entity_columns(),
        sa.CheckConstraint('end_time > start_time', name='ck_booking_interval'),
        sa.ForeignKeyConstraint(['listing_id'], ['listings.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('bookings', schema=None) as batch_op:
        batch_op.create_index('idx_booking_vendor', ['vendor_id'], unique=False)
        batch_op.create_index('idx_booking_status', ['status'], unique=False)
        batch_op.create_index(
            'idx_booking_listing_date',
            ['listing_id', 'booking_date', 'start_time', 'end_time'],
            unique=False,
        )


def downgrade() -> None:
    with op.batch_alter_table('bookings', schema=None) as batch_op:
        batch_op.drop_index('idx_booking_listing_date')
        batch_op.drop_index('idx_booking_status')
        batch_op.drop_index('idx_booking_vendor')
    op.drop_table('bookings')

    op.drop_table('amenities')

    with op.batch_alter_table('listings', schema=None) as batch_op:
        batch_op.drop_index('idx_listing_created')
        batch_op.drop_index('idx_listing_city')
        batch_op.drop_index('idx_listing_owner')
        batch_op.drop_index('idx_listing_status')
    op.drop_table('listings')
