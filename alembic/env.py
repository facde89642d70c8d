from logging.config import fileConfig
from tutorcenter.core.config import settings
from tutorcenter.core.database import Base
from tutorcenter.models.user_db.user_db import User  # noqa: F401
from tutorcenter.models.group_db.group_db import Group, GroupMembership  # noqa: F401
from tutorcenter.models.quiz_db.quiz_db import Quiz  # noqa: F401
from tutorcenter.models.quiz_db.quiz_question_db import QuizQuestion  # noqa: F401
from tutorcenter.models.quiz_db.quiz_submission_db import QuizSubmission  # noqa: F401
from sqlalchemy import engine_from_config, pool
from alembic import context

config = context.config
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


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
        config.get_section(config.config_ini_section),
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
