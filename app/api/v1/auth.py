"""Registration and login endpoints plus the bearer-token identity dependency."""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.tokens import TokenProvider
from app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from app.services.auth import AuthService
from app.services.users import SqlAlchemyUserStore

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_token_provider(request: Request) -> TokenProvider:
    """Dependency: the process-wide TokenProvider built at startup."""
    return request.app.state.token_provider


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    token_provider: Annotated[TokenProvider, Depends(get_token_provider)],
) -> AuthService:
    """Dependency: AuthService bound to the request's DB session."""
    return AuthService(SqlAlchemyUserStore(db), token_provider)


def get_current_username(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    token_provider: Annotated[TokenProvider, Depends(get_token_provider)],
) -> str | None:
    """Dependency: username from a valid Bearer token, or None if missing or invalid."""
    if credentials is None:
        return None
    token = credentials.credentials
    if not token_provider.validate_token(token):
        return None
    try:
        return token_provider.get_username_from_token(token)
    except jwt.PyJWTError:
        return None


@router.post("/register", response_model=AuthResponse, response_model_exclude_none=True)
def register(
    body: RegisterRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """Create a USER account. Returns 400 with a reason when the form is rejected."""
    result = service.register(body.username, body.email, body.password, body.confirm_password)
    if not result.success:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return result


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
def login(
    body: LoginRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """
    Authenticate with username or email and password; returns a JWT and the profile.
    Include the token in the Authorization header as: Bearer <token>
    """
    result = service.login(body.username_or_email, body.password)
    if not result.success:
        response.status_code = status.HTTP_401_UNAUTHORIZED
    return result
