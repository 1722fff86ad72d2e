"""SQLAlchemy declarative Base shared by ORM models and alembic autogenerate."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base; Base.metadata holds the users table."""
