"""Shared fixtures: a throwaway SQLite database standing in for PostgreSQL."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from gitops_demo.db import close_database, init_database
from gitops_demo.services.deployments import DeploymentStore

_APP_ENV_VARS = (
  'HOST',
  'PORT',
  'LOG_LEVEL',
  'APP_VERSION',
  'ENVIRONMENT',
  'DEPLOYMENT_ID',
  'DB_HOST',
  'DB_PORT',
  'DB_NAME',
  'DB_USER',
  'DB_PASSWORD',
  'DB_SSL',
  'DB_POOL_SIZE',
  'DB_MAX_OVERFLOW',
  'DB_POOL_TIMEOUT',
  'DB_POOL_RECYCLE_INTERVAL',
  'REQUEST_TIMEOUT_SECONDS',
  'HEALTH_PROBE_TIMEOUT',
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
  """Start every test from the documented defaults."""
  for name in _APP_ENV_VARS:
    monkeypatch.delenv(name, raising=False)
  monkeypatch.delenv('DATABASE_URL', raising=False)


@pytest.fixture
def database_url(tmp_path, monkeypatch):
  """Point the app at a fresh SQLite file."""
  url = f'sqlite+aiosqlite:///{tmp_path / "gitopsdb.sqlite"}'
  monkeypatch.setenv('DATABASE_URL', url)
  yield url
  asyncio.run(close_database())


@pytest.fixture
def unreachable_database_url(tmp_path, monkeypatch):
  """Point the app at a SQLite file in a directory that does not exist."""
  url = f'sqlite+aiosqlite:///{tmp_path / "missing" / "gitopsdb.sqlite"}'
  monkeypatch.setenv('DATABASE_URL', url)
  yield url
  asyncio.run(close_database())


@pytest.fixture
def store(database_url):
  """A DeploymentStore with the schema already created."""
  init_database()
  store = DeploymentStore()
  assert asyncio.run(store.ensure_schema()) is True
  return store


@pytest.fixture
def client(database_url):
  """TestClient with the schema in place before the first request."""
  init_database()
  assert asyncio.run(DeploymentStore().ensure_schema()) is True
  asyncio.run(close_database())

  from gitops_demo.app import app

  with TestClient(app) as test_client:
    yield test_client


@pytest.fixture
def unreachable_client(unreachable_database_url):
  """TestClient whose database can never be opened."""
  from gitops_demo.app import app

  with TestClient(app) as test_client:
    yield test_client
