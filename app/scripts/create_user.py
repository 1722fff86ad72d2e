"""
Create a user from the command line (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [--role ROLE] [--inactive]
Example:
  python -m app.scripts.create_user admin admin@example.com your-secure-password --role ADMIN
"""
import argparse
import logging
import sys

from app.core.database import SessionLocal
from app.models.user import DEFAULT_ROLE
from app.services.auth import AuthService
from app.services.users import DuplicateUserError, SqlAlchemyUserStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Keystone user with an explicit role.")
    parser.add_argument("username", help="Username")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (at least 6 characters)")
    parser.add_argument("--role", default=DEFAULT_ROLE, help=f"Role string (default {DEFAULT_ROLE})")
    parser.add_argument("--inactive", action="store_true", help="Create the account disabled")
    args = parser.parse_args(argv)

    username = args.username.strip()
    email = args.email.strip()
    role = args.role.strip().upper()
    if not role:
        print("Role must be non-empty.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        service = AuthService(SqlAlchemyUserStore(db))
        failure = service.validate_registration(username, email, args.password, args.password)
        if failure is not None:
            print(failure, file=sys.stderr)
            return 1
        try:
            user = service.create_user(
                username, email, args.password, role=role, is_active=not args.inactive
            )
        except DuplicateUserError as e:
            print(f"User {e.field} already exists.", file=sys.stderr)
            return 1
        logger.info("Created user %s (id=%s, role=%s)", user.username, user.id, user.role)
        print(f"Created user '{user.username}' with role '{user.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
