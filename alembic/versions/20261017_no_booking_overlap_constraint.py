"""Exclusion constraint against overlapping bookings (PostgreSQL only)

Revision ID: 7f4b2d8e1a63
Revises: 3c1e9a7d5b20
Create Date: 2026-10-17

Prevents two pending or confirmed bookings on the same listing from
covering overlapping time on the same date. The range is built half-open
('[)'), so a booking ending at 12:00 and one starting at 12:00 coexist.

The constraint name is matched by SQLAlchemyReservationStore to turn a
violation into ReservationConflictError. Other dialects are skipped; there
the store's transaction-level check is the only guard.
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '7f4b2d8e1a63'
down_revision: Union[str, None] = '3c1e9a7d5b20'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _is_postgresql() -> bool:
    return op.get_bind().dialect.name == 'postgresql'


def upgrade() -> None:
    if not _is_postgresql():
        return

    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    op.execute(
        """
        ALTER TABLE bookings
        ADD CONSTRAINT no_booking_overlap
        EXCLUDE USING gist (
            listing_id WITH =,
            tsrange(booking_date + start_time, booking_date + end_time, '[)') WITH &&
        )
        WHERE (status IN ('pending', 'confirmed'))
        """
    )


def downgrade() -> None:
    if not _is_postgresql():
        return

    op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS no_booking_overlap")
    # btree_gist stays: other indexes may depend on it
