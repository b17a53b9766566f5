"""API routers module."""

from .deployments import router as deployments_router
from .health import router as health_router
from .version import router as version_router

__all__ = [
  'deployments_router',
  'health_router',
  'version_router',
]
