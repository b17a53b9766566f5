"""Service layer."""

from .deployments import DEFAULT_LIST_LIMIT, DeploymentStore
from .health import HealthStatus, check_health

__all__ = [
  'DEFAULT_LIST_LIMIT',
  'DeploymentStore',
  'HealthStatus',
  'check_health',
]
