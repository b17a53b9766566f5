"""Database module."""

from .database import (
  check_database_connection,
  close_database,
  create_tables,
  describe_error,
  get_engine,
  get_session,
  init_database,
  session_scope,
)
from .models import Base, Deployment

__all__ = [
  'Base',
  'Deployment',
  'check_database_connection',
  'close_database',
  'create_tables',
  'describe_error',
  'get_engine',
  'get_session',
  'init_database',
  'session_scope',
]
