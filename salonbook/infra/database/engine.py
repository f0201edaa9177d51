"""
salonbook.infra.database.engine – one async engine and session factory per process.

The API lifespan and the scripts call, in order:
ensure_database_exists() → build_engine() → build_session_factory() → init_db(),
and close_engine() on the way out.
"""
from __future__ import annotations

import logging
from typing import Optional

import asyncpg
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Registers every model on Base.metadata before create_all()
import salonbook.infra.database.models  # noqa: F401
from salonbook.config.postgres import PostgresConfig, load_postgres_config
from salonbook.infra.database.models.base import Base

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None

# Schema changes made after tables first shipped; each is idempotent
_MIGRATIONS = (
    "ALTER TABLE appointments ADD COLUMN IF NOT EXISTS reminder_sent BOOLEAN NOT NULL DEFAULT FALSE",
    "ALTER TABLE appointments ADD COLUMN IF NOT EXISTS partner_id UUID",
    "ALTER TABLE client_plans ADD COLUMN IF NOT EXISTS created_by_user_id UUID",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_appointments_active_slot "
    "ON appointments(appointment_date, appointment_time) WHERE status <> 'cancelled'",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_appointments_active_plan_session "
    "ON appointments(plan_id, session_number) "
    "WHERE status <> 'cancelled' AND plan_id IS NOT NULL",
)


async def ensure_database_exists(config: Optional[PostgresConfig] = None) -> None:
    """CREATE DATABASE on first run. Unreachable servers and odd names are left alone."""
    config = config or load_postgres_config()
    dbname = config.database_name
    if dbname == "postgres":
        return
    if not config.has_safe_name:
        logger.warning("ensure_database_exists: not creating database with name %r", dbname)
        return
    try:
        conn = await asyncpg.connect(config.maintenance_url)
    except (OSError, asyncpg.PostgresError) as exc:
        logger.debug("ensure_database_exists: server unreachable (%s)", exc)
        return
    try:
        if await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", dbname) is None:
            await conn.execute(f'CREATE DATABASE "{dbname}"')
            logger.info("Created database %s", dbname)
    finally:
        await conn.close()


def build_engine(config: Optional[PostgresConfig] = None) -> AsyncEngine:
    """Create the engine on first call; later calls return the same one."""
    global _engine
    if _engine is None:
        config = config or load_postgres_config()
        _engine = create_async_engine(
            config.async_url,
            echo=config.echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            pool_pre_ping=True,
            connect_args={"server_settings": {"application_name": config.application_name}},
        )
        logger.info(
            "AsyncEngine ready for %s (pool %d+%d)",
            config.database_name, config.pool_size, config.max_overflow,
        )
    return _engine


def build_session_factory(engine: Optional[AsyncEngine] = None) -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            engine or build_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def _migrate(conn: AsyncConnection) -> None:
    for stmt in _MIGRATIONS:
        try:
            async with conn.begin_nested():
                await conn.execute(text(stmt))
        except DBAPIError as exc:
            # An index cannot be built while duplicate active rows exist
            logger.warning("Migration skipped (%s): %s", exc.orig.__class__.__name__, stmt)


async def init_db(config: Optional[PostgresConfig] = None) -> None:
    """create_all() for new tables, then the idempotent migrations."""
    engine = build_engine(config)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await _migrate(conn)
    logger.info("Database schema ready")


async def close_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("AsyncEngine disposed")
