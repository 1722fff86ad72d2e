"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import router as v1_router
from app.core.config import settings
from app.core.tokens import TokenProvider
from app.schemas.auth import AuthResponse

logger = logging.getLogger(__name__)

AUTH_PATH_PREFIX = f"{settings.API_V1_PREFIX}/auth/"
MSG_MALFORMED_BODY = "Malformed request body"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the token provider once at startup; a bad JWT_SECRET stops the app here."""
    app.state.token_provider = TokenProvider.from_settings(settings)
    logger.info(
        "Token provider ready (expiration_ms=%s)", app.state.token_provider.expiration_ms
    )
    yield


app = FastAPI(
    title="Keystone Auth API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


def _validation_message(exc: RequestValidationError) -> str:
    """First validation error as a short message naming the offending field."""
    errors = exc.errors()
    if not errors:
        return MSG_MALFORMED_BODY
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    if first.get("type") == "json_invalid" or not loc:
        return MSG_MALFORMED_BODY
    return f"Invalid value for {loc[-1]}"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Auth routes answer bad bodies with a 400 AuthResponse; other routes keep FastAPI's 422."""
    if not request.url.path.startswith(AUTH_PATH_PREFIX):
        return await request_validation_exception_handler(request, exc)
    message = _validation_message(exc)
    logger.info("Rejected %s: %s", request.url.path, message)
    return JSONResponse(
        status_code=400,
        content=AuthResponse.failure(message).model_dump(by_alias=True, exclude_none=True),
    )


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Keystone Auth API"}
