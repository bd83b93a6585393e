"""
Unit tests for engine and session helpers.
"""

from datetime import time
from decimal import Decimal

import pytest
from sqlalchemy import select

from space_engine.database import check_connection, create_db_engine, get_db_context
from space_engine.models.listings import Listing


def _listing(owner_id) -> Listing:
    return Listing(
        owner_id=owner_id,
        title="Yard",
        address="1 Market Street",
        city="London",
        hourly_rate=Decimal("10.00"),
        daily_rate=Decimal("60.00"),
        opening_time=time(6),
        closing_time=time(22),
    )


class TestGetDbContext:
    """Test the commit/rollback context manager."""

    def test_commits_on_exit(self, session_factory, owner_id):
        with get_db_context(session_factory) as db:
            db.add(_listing(owner_id))

        with session_factory() as session:
            assert session.scalars(select(Listing)).one().title == "Yard"

    def test_rolls_back_on_error(self, session_factory, owner_id):
        with pytest.raises(RuntimeError):
            with get_db_context(session_factory) as db:
                db.add(_listing(owner_id))
                db.flush()
                raise RuntimeError("abort")

        with session_factory() as session:
            assert session.scalars(select(Listing)).all() == []


class TestCheckConnection:

    def test_connected(self, engine):
        assert check_connection(engine) is True

    def test_unreachable_database(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path}/missing/dir/db.sqlite")
        try:
            assert check_connection(engine) is False
        finally:
            engine.dispose()
