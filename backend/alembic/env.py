from logging.config import fileConfig

from dotenv import load_dotenv
from sqlalchemy import engine_from_config
from sqlalchemy import pool
from alembic import context

from gymapp.config import settings
from gymapp.db.base import Base
from gymapp.db.tables import ALL_TABLE_NAMES
from gymapp.models.booking import Booking  # noqa: F401
from gymapp.models.message import Message  # noqa: F401
from gymapp.models.payment import Payment  # noqa: F401
from gymapp.models.subscription import Subscription  # noqa: F401
from gymapp.models.trainer_availability import AvailabilitySlot, TrainerAvailability  # noqa: F401
from gymapp.models.user import User  # noqa: F401
from gymapp.models.workout_plan import WorkoutPlan, WorkoutPlanClient  # noqa: F401

load_dotenv()

# Model tables and migrated tables must stay in step.
_registered = set(Base.metadata.tables)
_expected = set(ALL_TABLE_NAMES)
assert _registered == _expected, (
    f"Model tables {_registered} must match gymapp.db.tables.ALL_TABLE_NAMES {_expected}. "
    "Add a migration and update ALL_TABLE_NAMES together."
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
