"""Alembic environment configuration for PostgreSQL + SQLAlchemy 2.0.

The connection URL comes from Settings (sync psycopg2 URL) unless
``sqlalchemy.url`` is set explicitly in alembic.ini. The expression index on
the reading minute bucket and the forecast view are managed by hand in the
migrations, so autogenerate is told to ignore them.
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context
from pizzint.core.config import settings
from pizzint.core.models import Base

# Alembic Config object -- provides access to .ini values
config = context.config

# Set up Python logging from the config file
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", settings.sync_database_url)

# Target metadata for autogenerate support
target_metadata = Base.metadata

# Objects created with raw SQL in migrations
MANUAL_OBJECTS = {
    "uq_pizza_readings_minute",
    "readings_with_forecast",
}


def include_name(name, type_, parent_names):
    """Filter hand-managed objects out of autogenerate."""
    return name not in MANUAL_OBJECTS


# ---------------------------------------------------------------------------
# Migration runners
# ---------------------------------------------------------------------------


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL to stdout)."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_name=include_name,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode (connect to database)."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_name=include_name,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
