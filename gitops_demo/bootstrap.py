"""Background schema bootstrap.

The server starts accepting requests before the deployments table is
confirmed to exist. Requests that arrive while the backend is still down
fail individually with a backend error.
"""

import asyncio
import logging
from typing import Optional

from .services.deployments import DeploymentStore

logger = logging.getLogger(__name__)

_bootstrap_task: Optional[asyncio.Task] = None


async def _run_bootstrap() -> bool:
  ok = await DeploymentStore().ensure_schema()
  if not ok:
    logger.warning('Schema bootstrap failed; requests will fail until the database is reachable')
  return ok


def start_schema_bootstrap() -> asyncio.Task:
  """Schedule schema creation on the running event loop."""
  global _bootstrap_task

  if _bootstrap_task is not None and not _bootstrap_task.done():
    logger.warning('Schema bootstrap already running')
    return _bootstrap_task

  _bootstrap_task = asyncio.create_task(_run_bootstrap())
  logger.info('Started schema bootstrap background task')
  return _bootstrap_task


async def stop_schema_bootstrap():
  """Cancel the bootstrap task if it is still pending."""
  global _bootstrap_task

  if _bootstrap_task is not None:
    if not _bootstrap_task.done():
      _bootstrap_task.cancel()
    try:
      await _bootstrap_task
    except asyncio.CancelledError:
      pass
    _bootstrap_task = None
