"""
Alembic environment for the listings and bookings schema.

The database URL always comes from ``Settings`` (``DATABASE_URL``), never
from alembic.ini, so migrations and the API hit the same database. Online
runs build the engine through ``space_engine.database`` to get the same
dialect setup (SQLite foreign keys, production checks) as the service.
"""

import logging
from logging.config import fileConfig

from alembic import context

from space_engine.config import get_settings
from space_engine.database import create_engine_from_settings
from space_engine.models import Base  # registers Listing, Amenities, Booking

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

settings = get_settings()
config.set_main_option("sqlalchemy.url", settings.database_url)


def run_migrations_offline() -> None:
    """Emit SQL to stdout without a database connection."""
    context.configure(
        url=settings.database_url,
        target_metadata=Base.metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine_from_settings(settings)
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=Base.metadata,
                # SQLite cannot ALTER most constraints in place
                render_as_batch=connection.dialect.name == "sqlite",
                compare_type=True,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


logger.info(f"Migrating {'offline' if context.is_offline_mode() else 'online'} ({settings.database_url.split(':', 1)[0]})")
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
