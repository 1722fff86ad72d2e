"""User persistence: the UserStore interface and its SQLAlchemy implementation."""

import logging
from typing import Literal, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User

logger = logging.getLogger(__name__)


class DuplicateUserError(Exception):
    """Raised by UserStore.save when username or email is already taken."""

    def __init__(self, field: Literal["username", "email"]) -> None:
        self.field = field
        super().__init__(f"{field} already exists")


class UserStore(Protocol):
    """Lookup and persistence of User records by username, email or id."""

    def exists_by_username(self, username: str) -> bool: ...

    def exists_by_email(self, email: str) -> bool: ...

    def find_by_username(self, username: str) -> User | None: ...

    def find_by_email(self, email: str) -> User | None: ...

    def find_by_id(self, user_id: int) -> User | None: ...

    def save(self, user: User) -> User: ...


class SqlAlchemyUserStore:
    """UserStore over a SQLAlchemy session. Uniqueness is enforced by the users table indexes."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def exists_by_username(self, username: str) -> bool:
        return self.find_by_username(username) is not None

    def exists_by_email(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def find_by_username(self, username: str) -> User | None:
        return self.db.query(User).filter(User.username == username).first()

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def save(self, user: User) -> User:
        """Insert or update user and commit; id is assigned on first save."""
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # A concurrent insert won the race; work out which column clashed.
            field = "username" if self.exists_by_username(user.username) else "email"
            logger.info("User save rejected: %s already exists", field)
            raise DuplicateUserError(field) from e
        self.db.refresh(user)
        return user
