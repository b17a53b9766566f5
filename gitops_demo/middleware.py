"""HTTP middleware: per-request timeout and access logging."""

import asyncio
import logging
import time

from fastapi import Request
from fastapi.responses import JSONResponse

from .config import settings_from_request
from .errors import RequestTimeoutError, status_code_for

logger = logging.getLogger(__name__)


async def request_timeout_middleware(request: Request, call_next):
  """Abort requests that run past REQUEST_TIMEOUT_SECONDS with a 504."""
  timeout = settings_from_request(request).request_timeout
  started = time.perf_counter()

  try:
    if timeout > 0:
      response = await asyncio.wait_for(call_next(request), timeout=timeout)
    else:
      response = await call_next(request)
  except asyncio.TimeoutError:
    exc = RequestTimeoutError(f'Request timed out after {timeout:g}s')
    logger.error(f'{request.method} {request.url.path} timed out after {timeout:g}s')
    return JSONResponse(status_code=status_code_for(exc), content={'error': exc.message})

  elapsed_ms = (time.perf_counter() - started) * 1000
  logger.info(f'{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)')
  return response
