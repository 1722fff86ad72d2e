"""
Registration and login: input checks, uniqueness, password policy, token issuance.

Failures are returned as AuthResponse(success=False, message=...) rather than
raised. Login merges "unknown user" and "wrong password" into one message but
reports inactive accounts separately.
"""

import logging

from app.core.security import PASSWORD_MIN_LEN, hash_password, verify_password
from app.core.tokens import TokenProvider
from app.models.user import DEFAULT_ROLE, User
from app.schemas.auth import AuthResponse, UserProfile
from app.services.users import DuplicateUserError, UserStore

logger = logging.getLogger(__name__)

MSG_USERNAME_REQUIRED = "Username is required"
MSG_EMAIL_REQUIRED = "Email is required"
MSG_PASSWORD_REQUIRED = "Password is required"
MSG_PASSWORDS_DO_NOT_MATCH = "Passwords do not match"
MSG_PASSWORD_TOO_SHORT = f"Password must be at least {PASSWORD_MIN_LEN} characters"
MSG_USERNAME_EXISTS = "Username already exists"
MSG_EMAIL_EXISTS = "Email already exists"
MSG_REGISTERED = "User registered successfully"

MSG_IDENTIFIER_REQUIRED = "Username or email is required"
MSG_INVALID_CREDENTIALS = "Invalid username/email or password"
MSG_ACCOUNT_INACTIVE = "Account is inactive"
MSG_LOGIN_OK = "Login successful"

_DUPLICATE_MESSAGES = {
    "username": MSG_USERNAME_EXISTS,
    "email": MSG_EMAIL_EXISTS,
}


def _to_profile(user: User) -> UserProfile:
    return UserProfile.model_validate(user)


class AuthService:
    """Authentication over a UserStore, issuing tokens with a TokenProvider."""

    def __init__(self, store: UserStore, token_provider: TokenProvider | None = None) -> None:
        """token_provider may be omitted when only registration or user creation is needed."""
        self.store = store
        self.token_provider = token_provider

    def validate_registration(
        self,
        username: str | None,
        email: str | None,
        password: str | None,
        confirm_password: str | None,
    ) -> str | None:
        """Return the first registration failure message, or None if the input is acceptable."""
        if not username:
            return MSG_USERNAME_REQUIRED
        if not email:
            return MSG_EMAIL_REQUIRED
        if not password:
            return MSG_PASSWORD_REQUIRED
        if password != confirm_password:
            return MSG_PASSWORDS_DO_NOT_MATCH
        if len(password) < PASSWORD_MIN_LEN:
            return MSG_PASSWORD_TOO_SHORT
        if self.store.exists_by_username(username):
            return MSG_USERNAME_EXISTS
        if self.store.exists_by_email(email):
            return MSG_EMAIL_EXISTS
        return None

    def create_user(
        self,
        username: str,
        email: str,
        password: str,
        role: str = DEFAULT_ROLE,
        is_active: bool = True,
    ) -> User:
        """Hash the password and persist a new user. Raises DuplicateUserError on conflict."""
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
        )
        return self.store.save(user)

    def register(
        self,
        username: str | None,
        email: str | None,
        password: str | None,
        confirm_password: str | None,
    ) -> AuthResponse:
        """Validate the form and create a USER account; returns the public profile on success."""
        failure = self.validate_registration(username, email, password, confirm_password)
        if failure is not None:
            logger.info("Registration rejected: %s", failure)
            return AuthResponse.failure(failure)

        try:
            user = self.create_user(username, email, password)
        except DuplicateUserError as e:
            return AuthResponse.failure(_DUPLICATE_MESSAGES[e.field])

        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return AuthResponse(success=True, message=MSG_REGISTERED, profile=_to_profile(user))

    def login(self, username_or_email: str | None, password: str | None) -> AuthResponse:
        """Check credentials and issue a token. Identifier is tried as username, then as email."""
        if self.token_provider is None:
            raise RuntimeError("AuthService has no TokenProvider; login is unavailable")
        if not username_or_email:
            return AuthResponse.failure(MSG_IDENTIFIER_REQUIRED)
        if not password:
            return AuthResponse.failure(MSG_PASSWORD_REQUIRED)

        user = self.store.find_by_username(username_or_email)
        if user is None:
            user = self.store.find_by_email(username_or_email)
        if user is None:
            logger.info("Login failed: unknown identifier")
            return AuthResponse.failure(MSG_INVALID_CREDENTIALS)

        if not user.is_active:
            logger.info("Login failed: account %s is inactive", user.username)
            return AuthResponse.failure(MSG_ACCOUNT_INACTIVE)

        if not verify_password(password, user.password_hash):
            logger.info("Login failed: bad password for %s", user.username)
            return AuthResponse.failure(MSG_INVALID_CREDENTIALS)

        token = self.token_provider.generate_token(user.username, user.id)
        logger.info("User %s logged in", user.username)
        return AuthResponse(
            success=True,
            message=MSG_LOGIN_OK,
            token=token,
            profile=_to_profile(user),
        )

    def get_user_by_username(self, username: str) -> User | None:
        return self.store.find_by_username(username)

    def get_user_by_email(self, email: str) -> User | None:
        return self.store.find_by_email(email)

    def get_user_by_id(self, user_id: int) -> User | None:
        return self.store.find_by_id(user_id)
