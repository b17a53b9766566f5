"""Deployment record storage.

The deployments table is an append-only log: records are inserted once and
read back newest first. Nothing here updates or deletes a row.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..db import Deployment, create_tables, describe_error, session_scope
from ..db.models import DEFAULT_STATUS, ENVIRONMENT_MAX_LENGTH, VERSION_MAX_LENGTH, utc_now
from ..errors import BackendError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 10

# Errors raised while reaching or querying the backend
_BACKEND_ERRORS = (SQLAlchemyError, OSError)


def _require_text(field: str, value: Optional[str], max_length: int) -> str:
  """Return the trimmed value or raise ValidationError."""
  if value is None:
    raise ValidationError(f'{field} is required')
  if not isinstance(value, str):
    raise ValidationError(f'{field} must be a string')
  value = value.strip()
  if not value:
    raise ValidationError(f'{field} must not be empty')
  if len(value) > max_length:
    raise ValidationError(f'{field} must be at most {max_length} characters')
  return value


class DeploymentStore:
  """Deployment log operations backed by the ``deployments`` table."""

  async def ensure_schema(self) -> bool:
    """Create the deployments table if it does not exist.

    Never raises: a failure is logged and reported as False so startup can
    continue with the backend unavailable.
    """
    try:
      await create_tables()
    except Exception:
      logger.exception('Database initialization failed')
      return False
    logger.info('Database initialized successfully')
    return True

  async def insert(self, version: Optional[str], environment: Optional[str]) -> Deployment:
    """Record a deployment and return it with its assigned id."""
    version = _require_text('version', version, VERSION_MAX_LENGTH)
    environment = _require_text('environment', environment, ENVIRONMENT_MAX_LENGTH)

    try:
      async with session_scope() as session:
        deployment = Deployment(
          version=version,
          environment=environment,
          deployed_at=utc_now(),
          status=DEFAULT_STATUS,
        )
        session.add(deployment)
        await session.flush()
        await session.refresh(deployment)
    except _BACKEND_ERRORS as e:
      logger.error(f'Failed to record deployment {version} to {environment}: {e}')
      raise BackendError(describe_error(e)) from e

    logger.info(f'Recorded deployment {deployment.id}: {version} to {environment}')
    return deployment

  async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> list[Deployment]:
    """Return up to ``limit`` deployments, newest first."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
      raise ValidationError('limit must be a positive integer')

    try:
      async with session_scope() as session:
        result = await session.execute(
          select(Deployment)
          .order_by(Deployment.deployed_at.desc(), Deployment.id.desc())
          .limit(limit)
        )
        return list(result.scalars().all())
    except _BACKEND_ERRORS as e:
      logger.error(f'Failed to list deployments: {e}')
      raise BackendError(describe_error(e)) from e
