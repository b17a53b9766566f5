"""Deployment history endpoints.

Errors raised by the store (ValidationError, BackendError) are turned into
JSON responses by the application's exception handlers.
"""

import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from ..services.deployments import DEFAULT_LIST_LIMIT, DeploymentStore

logger = logging.getLogger(__name__)
router = APIRouter()


class RecordDeploymentRequest(BaseModel):
  """Request to record a deployment."""

  version: Optional[str] = None
  environment: Optional[str] = None


@router.get('/deployments')
async def list_deployments():
  """Get the most recent deployments, newest first."""
  store = DeploymentStore()
  deployments = await store.list_recent(DEFAULT_LIST_LIMIT)
  return [deployment.to_dict() for deployment in deployments]


@router.post('/deployments')
async def record_deployment(body: RecordDeploymentRequest):
  """Record a deployment event."""
  store = DeploymentStore()

  logger.info(f'Recording deployment {body.version!r} to {body.environment!r}')
  deployment = await store.insert(body.version, body.environment)

  return deployment.to_dict()
