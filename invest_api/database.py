"""Audit database for request timings and simulation rows.

Clients, products and investments are kept in ``invest_api.store``. The
rows written here are diagnostic only: when ``DATABASE_URL`` cannot be
reached at startup, auditing is switched off and every API route keeps
working.
"""

from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from invest_api.config import settings
from invest_api.models.db_models import Base

logger = logging.getLogger(__name__)

_engine = None
_audit_sessions = None
_audit_enabled: bool = False


async def init_db() -> None:
    """Connect to the audit database and create ``performance_logs`` and
    ``simulation_audits``. Any connection failure leaves auditing off.
    """
    global _engine, _audit_sessions, _audit_enabled

    try:
        _engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True)
        _audit_sessions = async_sessionmaker(_engine, expire_on_commit=False)
        async with _engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except (SQLAlchemyError, OSError, ImportError) as exc:
        _audit_enabled = False
        logger.warning("Auditing off, %s not reachable: %s", settings.DATABASE_URL.split("@")[-1], exc)
        return

    _audit_enabled = True
    logger.info("Auditing on (%s).", settings.DATABASE_URL.split("@")[-1])


async def close_db() -> None:
    global _engine, _audit_enabled
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _audit_enabled = False
    logger.info("Audit engine disposed.")


def is_db_available() -> bool:
    return _audit_enabled


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession | None, None]:
    """Audit session committed on exit. ``None`` while auditing is off."""
    if not _audit_enabled or _audit_sessions is None:
        yield None
        return

    async with _audit_sessions() as session:
        async with session.begin():
            yield session


async def record_audit(row: Base) -> bool:
    """Store one audit row. Returns False when it was not written; the
    caller's response does not depend on it.
    """
    try:
        async with get_session() as session:
            if session is None:
                return False
            session.add(row)
    except SQLAlchemyError as exc:
        logger.warning("Dropped %s audit row: %s", type(row).__name__, exc)
        return False
    return True
