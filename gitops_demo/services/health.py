"""Composite health reporting.

A backend probe failure is a reported condition, not an exception: the
health endpoint always gets a HealthStatus back.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel

from ..config import Settings, get_settings
from ..db import check_database_connection

logger = logging.getLogger(__name__)

HEALTHY = 'healthy'
UNHEALTHY = 'unhealthy'


class HealthStatus(BaseModel):
  """Result of one health check."""

  status: str
  version: str
  environment: str
  timestamp: str
  error: Optional[str] = None

  @property
  def is_healthy(self) -> bool:
    return self.status == HEALTHY

  def to_response(self) -> dict:
    """Body for the /health endpoint."""
    if self.is_healthy:
      return {
        'status': self.status,
        'version': self.version,
        'timestamp': self.timestamp,
        'environment': self.environment,
      }
    return {'status': self.status, 'error': self.error}


async def check_health(settings: Optional[Settings] = None) -> HealthStatus:
  """Probe the backend and combine the result with static metadata."""
  settings = settings or get_settings()
  error = await check_database_connection(timeout=settings.health_probe_timeout)
  timestamp = datetime.now(timezone.utc).isoformat()

  if error:
    logger.warning(f'Health check failed: {error}')

  return HealthStatus(
    status=UNHEALTHY if error else HEALTHY,
    version=settings.app_version,
    environment=settings.environment,
    timestamp=timestamp,
    error=error,
  )
