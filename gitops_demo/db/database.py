"""Async database connection and session management.

Uses PostgreSQL with async SQLAlchemy and the psycopg3 driver. The engine is
process-wide state: it is created once at startup by ``init_database`` and
disposed on shutdown by ``close_database``. Failing to create it is not fatal;
callers get the error again on first use and report it per request.

A ``DATABASE_URL`` pointing at SQLite (``sqlite+aiosqlite://``) is accepted for
local runs and tests.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
  AsyncEngine,
  AsyncSession,
  async_sessionmaker,
  create_async_engine,
)
from sqlalchemy.pool import NullPool

from ..config import Settings, get_settings
from .models import Base

logger = logging.getLogger(__name__)

# Global engine and session factory
_engine: Optional[AsyncEngine] = None
_async_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def init_database(settings: Optional[Settings] = None) -> AsyncEngine:
  """Create the engine and session factory from settings.

  Replaces any engine created earlier without disposing it; call
  ``close_database`` first when re-initializing.
  """
  global _engine, _async_session_maker

  settings = settings or get_settings()
  url = settings.sqlalchemy_url()
  backend = make_url(url).get_backend_name()
  connect_args = build_connect_args(settings)

  if backend == 'sqlite':
    # aiosqlite connections are bound to the loop that opened them
    _engine = create_async_engine(url, poolclass=NullPool, echo=False)
  else:
    _engine = create_async_engine(
      url,
      pool_size=settings.db_pool_size,
      max_overflow=settings.db_max_overflow,
      pool_pre_ping=True,
      pool_recycle=settings.db_pool_recycle,
      pool_timeout=settings.db_pool_timeout,
      echo=False,
      connect_args=connect_args,
    )

  _async_session_maker = async_sessionmaker(
    _engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
  )

  ssl_label = connect_args.get('sslmode', 'from URL' if backend != 'sqlite' else 'disabled')
  logger.info(f'Database engine created for {settings.database_label()} (SSL: {ssl_label})')
  return _engine


def build_connect_args(settings: Settings) -> dict:
  """Driver connect arguments for a PostgreSQL engine.

  An explicit ``sslmode`` in DATABASE_URL takes precedence over DB_SSL.
  """
  url = make_url(settings.sqlalchemy_url())
  if url.get_backend_name() == 'sqlite' or 'sslmode' in url.query:
    return {}
  return {'sslmode': 'require'} if settings.db_ssl else {}


def get_engine() -> AsyncEngine:
  """Get the database engine, initializing if needed."""
  global _engine
  if _engine is None:
    init_database()
  return _engine


async def get_session() -> AsyncSession:
  """Create a new async database session, initializing the engine if needed."""
  if _async_session_maker is None:
    init_database()
  return _async_session_maker()


@asynccontextmanager
async def session_scope() -> AsyncGenerator[AsyncSession, None]:
  """Provide a transactional scope around a series of operations."""
  session = await get_session()
  try:
    yield session
    await session.commit()
  except Exception:
    await session.rollback()
    raise
  finally:
    await session.close()


async def create_tables():
  """Create all database tables that do not exist yet."""
  engine = get_engine()
  async with engine.begin() as conn:
    await conn.run_sync(Base.metadata.create_all, checkfirst=True)


async def check_database_connection(timeout: Optional[float] = None) -> Optional[str]:
  """Run a trivial round trip against the backend.

  Returns None when the backend answered, otherwise a description of the
  failure.
  """

  async def _probe():
    engine = get_engine()
    async with engine.connect() as conn:
      await conn.execute(text('SELECT 1'))

  try:
    if timeout:
      await asyncio.wait_for(_probe(), timeout=timeout)
    else:
      await _probe()
    return None
  except asyncio.TimeoutError:
    return f'Database did not respond within {timeout:g}s'
  except Exception as e:
    logger.warning(f'Database connection test failed: {e}')
    return describe_error(e)


async def close_database():
  """Dispose the engine and forget the session factory."""
  global _engine, _async_session_maker

  if _engine is not None:
    await _engine.dispose()
    logger.info('Database engine disposed')
  _engine = None
  _async_session_maker = None


def describe_error(exc: BaseException) -> str:
  """Prefer the driver's own message over SQLAlchemy's wrapped form."""
  orig = getattr(exc, 'orig', None)
  return str(orig) if orig is not None else str(exc)
