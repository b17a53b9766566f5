"""Environment-sourced application settings.

Every value is optional and falls back to the defaults the service has always
shipped with. The app loads settings once at startup (see ``app.lifespan``);
a bad value stops the process there instead of failing individual requests.
"""

from typing import Optional

from fastapi import Request
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import URL
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError


class ConfigurationError(ValueError):
  """Raised when an environment variable holds an unusable value."""


class Settings(BaseSettings):
  """Service configuration."""

  model_config = SettingsConfigDict(
    env_ignore_empty=True,
    extra='ignore',
    populate_by_name=True,
  )

  host: str = '0.0.0.0'
  port: int = 3000

  database_url: Optional[str] = None
  db_host: str = 'localhost'
  db_port: int = 5432
  db_name: str = 'gitopsdb'
  db_user: str = 'postgres'
  db_password: str = 'password'
  db_ssl: bool = True
  db_pool_size: int = 10
  db_max_overflow: int = 20
  db_pool_timeout: int = 10
  db_pool_recycle: int = Field(1800, alias='DB_POOL_RECYCLE_INTERVAL')

  app_version: str = '1.0.0'
  environment: str = 'development'
  deployment_id: str = 'local'

  request_timeout: float = Field(30.0, alias='REQUEST_TIMEOUT_SECONDS')
  health_probe_timeout: float = 5.0
  log_level: str = 'INFO'

  @field_validator('log_level')
  @classmethod
  def _upper_log_level(cls, value: str) -> str:
    return value.upper()

  def sqlalchemy_url(self) -> str | URL:
    """Return the async SQLAlchemy URL for the configured backend.

    An explicit DATABASE_URL wins. Plain ``postgresql://`` URLs are rewritten
    to the psycopg3 async driver.
    """
    if self.database_url:
      url = self.database_url
      if url.startswith('postgresql://'):
        url = url.replace('postgresql://', 'postgresql+psycopg://', 1)
      elif url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql+psycopg://', 1)
      return url

    return URL.create(
      drivername='postgresql+psycopg',
      username=self.db_user,
      password=self.db_password,
      host=self.db_host,
      port=self.db_port,
      database=self.db_name,
    )

  def database_label(self) -> str:
    """Host description safe for logs (no credentials)."""
    if self.database_url:
      return _mask_url(self.database_url)
    return f'{self.db_host}:{self.db_port}'


def _mask_url(url: str) -> str:
  """Render a database URL with the password masked."""
  try:
    return make_url(url).render_as_string(hide_password=True)
  except ArgumentError:
    return '<unparseable DATABASE_URL>'


def get_settings() -> Settings:
  """Load settings from the environment."""
  try:
    return Settings()
  except ValidationError as e:
    raise ConfigurationError(f'Invalid configuration: {e}') from e


def settings_from_request(request: Request) -> Settings:
  """FastAPI dependency returning the settings loaded for this app.

  Apps started without the lifespan hook load them on first use.
  """
  settings = getattr(request.app.state, 'settings', None)
  if settings is None:
    settings = get_settings()
    request.app.state.settings = settings
  return settings
