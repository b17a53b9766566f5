"""FastAPI app for the GitOps demo service."""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

# Configure logging BEFORE importing other modules
logging.basicConfig(
  level=os.getenv('LOG_LEVEL', 'INFO').upper(),
  format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
  handlers=[
    logging.StreamHandler(),
  ],
)

from dotenv import load_dotenv  # noqa: E402
from fastapi import FastAPI, Request  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.responses import FileResponse, JSONResponse  # noqa: E402
from fastapi.staticfiles import StaticFiles  # noqa: E402

from .bootstrap import start_schema_bootstrap, stop_schema_bootstrap  # noqa: E402
from .config import get_settings  # noqa: E402
from .db import close_database, init_database  # noqa: E402
from .errors import GitOpsError, ValidationError, status_code_for  # noqa: E402
from .middleware import request_timeout_middleware  # noqa: E402
from .routers import deployments_router, health_router, version_router  # noqa: E402

logger = logging.getLogger(__name__)

# Load environment variables
env_local_loaded = load_dotenv(dotenv_path='.env.local')
if env_local_loaded:
  logger.info('Loaded .env.local')

STATIC_DIR = Path(__file__).parent / 'static'


@asynccontextmanager
async def lifespan(app: FastAPI):
  """Async lifespan context manager for startup/shutdown events."""
  # Raises ConfigurationError before the server accepts any request
  settings = get_settings()
  app.state.settings = settings
  logger.info(f'GitOps Demo App running on port {settings.port}')
  logger.info(f'Version: {settings.app_version}')
  logger.info(f'Environment: {settings.environment}')
  logger.info(
    f'Database Host: {settings.database_label()} '
    f'(SSL: {"enabled" if settings.db_ssl else "disabled"})'
  )

  try:
    init_database(settings)
    # Runs in the background; requests are served while it completes
    start_schema_bootstrap()
  except Exception as e:
    logger.warning(
      f'Database initialization failed: {e}\n'
      'App will continue; deployment endpoints will fail until the database is reachable.'
    )

  yield

  logger.info('Shutting down application...')
  await stop_schema_bootstrap()
  await close_database()


app = FastAPI(
  title='GitOps Demo App',
  description='Health, version and deployment history for continuous delivery checks',
  lifespan=lifespan,
)

app.middleware('http')(request_timeout_middleware)


@app.exception_handler(GitOpsError)
async def gitops_error_handler(request: Request, exc: GitOpsError):
  """Map tagged errors to their status codes."""
  status_code = status_code_for(exc)
  if status_code >= 500:
    logger.error(f'{type(exc).__name__} for {request.method} {request.url.path}: {exc.message}')
  else:
    logger.info(f'{type(exc).__name__} for {request.method} {request.url.path}: {exc.message}')
  return JSONResponse(status_code=status_code, content={'error': exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
  """Report malformed request bodies the same way as store validation errors."""
  problems = []
  for err in exc.errors():
    location = '.'.join(str(part) for part in err.get('loc', ()) if part != 'body')
    message = err.get('msg', 'invalid value')
    problems.append(f'{location}: {message}' if location else message)
  error = ValidationError('; '.join(problems) or 'Invalid request body')
  return await gitops_error_handler(request, error)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
  """Log all unhandled exceptions."""
  logger.exception(f'Unhandled exception for {request.method} {request.url}: {exc}')
  return JSONResponse(status_code=500, content={'error': str(exc)})


app.include_router(health_router, tags=['health'])
app.include_router(version_router, tags=['version'])
app.include_router(deployments_router, prefix='/api', tags=['deployments'])

app.mount('/static', StaticFiles(directory=STATIC_DIR), name='static')


@app.get('/', include_in_schema=False)
async def landing_page():
  """Serve the static landing page."""
  return FileResponse(STATIC_DIR / 'index.html')
