from logging.config import fileConfig
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import engine_from_config
from sqlalchemy import pool
from alembic import context

from app.config import settings
from app.db.base import Base
from app.db.tables import ALL_TABLE_NAMES
from app.models.parking_report import ParkingReport  # noqa: F401
from app.models.parking_stats import ParkingStats  # noqa: F401
from app.models.region_promotion_audit import RegionPromotionAudit  # noqa: F401
from app.models.region_state import RegionState  # noqa: F401

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# Reports, derived stats, region states and the promotion audit: models and ALL_TABLE_NAMES must agree.
_registered = set(Base.metadata.tables)
_expected = set(ALL_TABLE_NAMES)
assert _registered == _expected, (
    f"Parking schema drift: models define {sorted(_registered - _expected)} not in ALL_TABLE_NAMES, "
    f"ALL_TABLE_NAMES lists {sorted(_expected - _registered)} with no model."
)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
config.set_main_option("sqlalchemy.url", settings.database_url)


def run_migrations_offline() -> None:
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
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
