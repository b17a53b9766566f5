"""Version endpoint used to verify which build is serving traffic."""

from fastapi import APIRouter, Depends

from ..config import Settings, settings_from_request

router = APIRouter()


@router.get('/version')
async def get_version(settings: Settings = Depends(settings_from_request)):
  return {
    'version': settings.app_version,
    'environment': settings.environment,
    'deployment_id': settings.deployment_id,
  }
