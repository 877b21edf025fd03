"""
Migration environment for the casetrack schema.

Migrations run on the sync driver derived from DATABASE_URL. SQLite needs batch
mode because it cannot ALTER most column definitions in place.
"""
from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context

from casetrack.core.config import settings
from casetrack.db.session import Base
from casetrack.db import models  # noqa: F401 - registers every table on Base.metadata

config = context.config

# postgresql+asyncpg:// and sqlite+aiosqlite:// become their sync forms
config.set_main_option("sqlalchemy.url", settings.database_url_sync)

# Logging is configured from alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Autogenerate diffs against the casetrack models
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting (alembic upgrade --sql)"""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a short-lived sync connection"""
    connectable = create_engine(
        config.get_main_option("sqlalchemy.url"),
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
