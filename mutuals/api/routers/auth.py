"""Account registration, login and token refresh."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from mutuals.api.dependencies import (
    CurrentIdentity,
    FieldRule,
    Format,
    ValidatedRequest,
    rate_limit,
    validate_request,
)
from mutuals.api.schemas import ERROR_RESPONSES, Envelope
from mutuals.api.utils.responses import created_response, success_response
from mutuals.core.config import get_settings
from mutuals.core.constants import UserRole
from mutuals.domain.auth import AuthService
from mutuals.infrastructure.database import DatabaseSession

EMAIL_RULE = FieldRule(
    "email",
    required=True,
    type="string",
    format=Format.EMAIL,
    trim=True,
    lowercase=True,
    error="Please provide a valid email",
)

REGISTER_RULES = (
    EMAIL_RULE,
    FieldRule(
        "password",
        required=True,
        type="string",
        min_length=6,
        error="Password must be at least 6 characters long",
    ),
    FieldRule(
        "firstName", required=True, type="string", trim=True, error="First name is required"
    ),
    FieldRule(
        "lastName", required=True, type="string", trim=True, error="Last name is required"
    ),
    FieldRule("role", choices=tuple(UserRole), error="Invalid role"),
)

LOGIN_RULES = (
    EMAIL_RULE,
    FieldRule("password", required=True, type="string", error="Password is required"),
)

REFRESH_RULES = (
    FieldRule(
        "refreshToken",
        required=True,
        type="string",
        trim=True,
        error="Refresh token is required",
    ),
)

router = APIRouter(prefix="/auth", tags=["auth"], responses=ERROR_RESPONSES)


def get_auth_service(db: DatabaseSession) -> AuthService:
    return AuthService(db, get_settings().auth_config)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post(
    "/register",
    status_code=201,
    response_model=Envelope,
    dependencies=[Depends(rate_limit("auth"))],
)
async def register(
    validated: Annotated[ValidatedRequest, Depends(validate_request(*REGISTER_RULES))],
    service: AuthServiceDep,
) -> Response:
    """Create an account and return a token pair."""
    body = validated.body
    result = await service.register(
        email=body["email"],
        password=body["password"],
        first_name=body["firstName"],
        last_name=body["lastName"],
        role=UserRole(body["role"]) if "role" in body else None,
    )
    return created_response(result, "User registered successfully")


@router.post(
    "/login",
    response_model=Envelope,
    dependencies=[Depends(rate_limit("auth"))],
)
async def login(
    validated: Annotated[ValidatedRequest, Depends(validate_request(*LOGIN_RULES))],
    service: AuthServiceDep,
) -> Response:
    """Exchange credentials for a token pair.

    Failed attempts count against the auth rate limit; successful ones do not.
    """
    result = await service.login(
        email=validated.body["email"], password=validated.body["password"]
    )
    return success_response(result, "Login successful")


@router.post("/refresh", response_model=Envelope)
async def refresh(
    validated: Annotated[ValidatedRequest, Depends(validate_request(*REFRESH_RULES))],
    service: AuthServiceDep,
) -> Response:
    result = await service.refresh(validated.body["refreshToken"])
    return success_response(result, "Token refreshed successfully")


@router.get("/me", response_model=Envelope)
async def me(identity: CurrentIdentity, service: AuthServiceDep) -> Response:
    result = await service.get_profile(identity.id)
    return success_response(result, "Profile retrieved successfully")
