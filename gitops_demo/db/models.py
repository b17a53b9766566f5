"""Database models for the deployment log."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

VERSION_MAX_LENGTH = 50
ENVIRONMENT_MAX_LENGTH = 20
STATUS_MAX_LENGTH = 20
DEFAULT_STATUS = 'active'


def utc_now() -> datetime:
  """Return the current UTC datetime."""
  return datetime.now(timezone.utc)


class Base(DeclarativeBase):
  """Base class for SQLAlchemy models."""

  pass


class Deployment(Base):
  """One deployment event. Rows are append-only and never updated."""

  __tablename__ = 'deployments'

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  version: Mapped[str] = mapped_column(String(VERSION_MAX_LENGTH), nullable=False)
  environment: Mapped[str] = mapped_column(String(ENVIRONMENT_MAX_LENGTH), nullable=False)
  deployed_at: Mapped[datetime] = mapped_column(
    DateTime(timezone=True),
    default=utc_now,
    server_default=func.now(),
  )
  status: Mapped[str] = mapped_column(
    String(STATUS_MAX_LENGTH),
    default=DEFAULT_STATUS,
    server_default=DEFAULT_STATUS,
  )

  def to_dict(self) -> dict:
    """Serialize for JSON responses."""
    return {
      'id': self.id,
      'version': self.version,
      'environment': self.environment,
      'deployed_at': self.deployed_at.isoformat() if self.deployed_at else None,
      'status': self.status,
    }
