"""ORM model for application users (registration and JWT login)."""

from sqlalchemy import Boolean, Column, Integer, String

from app.models.base import Base

DEFAULT_ROLE = "USER"


class User(Base):
    """
    User account. password_hash is a bcrypt hash, never the plain password.

    role: free-form role string, 'USER' unless set by an administrator
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=DEFAULT_ROLE)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, username={self.username!r}, role={self.role!r})"
