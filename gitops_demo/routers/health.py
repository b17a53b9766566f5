"""Health check endpoint for load balancer probes and blue-green cutovers."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..config import Settings, settings_from_request
from ..services.health import check_health

router = APIRouter()


@router.get('/health')
async def health_check(settings: Settings = Depends(settings_from_request)):
  """Return 200 when the database answers a trivial query, 500 otherwise.

  The unhealthy case is a normal response carrying the probe error, so a
  dead backend never takes the endpoint down with it.
  """
  health = await check_health(settings)
  return JSONResponse(
    status_code=200 if health.is_healthy else 500,
    content=health.to_response(),
  )
