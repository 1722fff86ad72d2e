"""Current-user profile endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from app.api.v1.auth import get_auth_service, get_current_username
from app.schemas.auth import AuthResponse, UserProfile
from app.services.auth import AuthService

router = APIRouter()


@router.get("/me", response_model=AuthResponse, response_model_exclude_none=True)
def get_me(
    response: Response,
    username: Annotated[str | None, Depends(get_current_username)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """Profile of the token's user: 401 without a valid token, 404 if the user no longer exists."""
    if username is None:
        response.status_code = status.HTTP_401_UNAUTHORIZED
        response.headers["WWW-Authenticate"] = "Bearer"
        return AuthResponse.failure("Unauthorized")

    user = service.get_user_by_username(username)
    if user is None:
        response.status_code = status.HTTP_404_NOT_FOUND
        return AuthResponse.failure("User not found")

    return AuthResponse(
        success=True,
        message="User retrieved successfully",
        profile=UserProfile.model_validate(user),
    )
