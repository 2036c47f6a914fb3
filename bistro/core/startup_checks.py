from __future__ import annotations

import logging
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from bistro.core import config

logger = logging.getLogger(__name__)


def validate_database_environment() -> None:
    if config.IS_PROD and config.DATABASE_URL.startswith("sqlite"):
        logger.critical("SQLite is not allowed when ENV=%s", config.ENV)
        raise RuntimeError("SQLite is forbidden in production environment")


def report_payment_configuration() -> None:
    """Missing credentials disable payments only; the rest of the service still starts."""
    if config.PAYMENT_PROVIDER == "mock":
        logger.warning("payments use the mock provider; no money will move")
    elif not config.STRIPE_SECRET_KEY:
        logger.warning("STRIPE_SECRET_KEY is not set; payment endpoints will answer 500")
    if config.REQUIRE_PAYMENT and not (config.STRIPE_SECRET_KEY or config.PAYMENT_PROVIDER == "mock"):
        logger.error("REQUIRE_PAYMENT is on but no payment provider is usable; checkout will fail")


def ensure_migrations_applied(*, engine: Engine, alembic_config_path: Path) -> None:
    if not alembic_config_path.exists():
        logger.critical("alembic config not found path=%s", alembic_config_path)
        raise RuntimeError("alembic config not found")

    script_directory = ScriptDirectory.from_config(Config(str(alembic_config_path)))
    expected = set(script_directory.get_heads())

    with engine.connect() as connection:
        if not inspect(connection).has_table("alembic_version"):
            logger.critical("alembic_version table missing; run `alembic upgrade head`")
            raise RuntimeError("Database has no migration state")
        rows = connection.exec_driver_sql("SELECT version_num FROM alembic_version").fetchall()

    current = {row[0] for row in rows if row and row[0]}
    if current != expected:
        logger.critical("pending migrations current=%s expected=%s", sorted(current), sorted(expected))
        raise RuntimeError("Pending migrations detected")
    logger.info("migration state verified")
