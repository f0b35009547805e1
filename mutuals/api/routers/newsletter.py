"""Newsletter subscription endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from mutuals.api.dependencies import (
    FieldRule,
    Format,
    ValidatedRequest,
    authenticate,
    rate_limit,
    require_roles,
    validate_request,
)
from mutuals.api.pagination import Pagination
from mutuals.api.schemas import ERROR_RESPONSES, Envelope
from mutuals.api.utils.responses import (
    created_response,
    paginated_response,
    success_response,
)
from mutuals.core.constants import SubscriptionSource, SubscriptionStatus, UserRole
from mutuals.domain.newsletter import NewsletterService
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

SUBSCRIBE_RULES = (
    EMAIL_RULE,
    FieldRule(
        "name",
        type="string",
        trim=True,
        max_length=255,
        error="Name must not exceed 255 characters",
    ),
    FieldRule("source", choices=tuple(SubscriptionSource), error="Invalid source"),
    FieldRule("preferences", type="object", error="Preferences must be an object"),
)

UNSUBSCRIBE_RULES = (EMAIL_RULE,)

LIST_RULES = (
    FieldRule(
        "status", location="query", choices=tuple(SubscriptionStatus), error="Invalid status"
    ),
)

ADMIN_ONLY = [
    Depends(authenticate),
    Depends(require_roles(UserRole.SUPER_ADMIN, UserRole.ADMIN)),
]

router = APIRouter(prefix="/newsletter", tags=["newsletter"], responses=ERROR_RESPONSES)


def get_newsletter_service(request: Request, db: DatabaseSession) -> NewsletterService:
    state = request.app.state
    return NewsletterService(db, state.mailing_list_client, state.email_client)


NewsletterServiceDep = Annotated[NewsletterService, Depends(get_newsletter_service)]


@router.post(
    "/subscribe",
    status_code=201,
    response_model=Envelope,
    dependencies=[Depends(rate_limit("newsletter"))],
)
async def subscribe(
    validated: Annotated[ValidatedRequest, Depends(validate_request(*SUBSCRIBE_RULES))],
    service: NewsletterServiceDep,
) -> Response:
    """Subscribe an address, or reactivate one that unsubscribed."""
    body = validated.body
    subscriber = await service.subscribe(
        body["email"],
        name=body.get("name") or None,
        source=SubscriptionSource(body["source"]) if "source" in body else None,
        preferences=body.get("preferences"),
    )
    return created_response(subscriber, "Successfully subscribed to newsletter")


@router.post("/unsubscribe", response_model=Envelope)
async def unsubscribe(
    validated: Annotated[ValidatedRequest, Depends(validate_request(*UNSUBSCRIBE_RULES))],
    service: NewsletterServiceDep,
) -> Response:
    subscriber = await service.unsubscribe(validated.body["email"])
    return success_response(subscriber, "Successfully unsubscribed from newsletter")


@router.get("/subscribers", response_model=Envelope, dependencies=ADMIN_ONLY)
async def list_subscribers(
    pagination: Pagination,
    validated: Annotated[ValidatedRequest, Depends(validate_request(*LIST_RULES))],
    service: NewsletterServiceDep,
) -> Response:
    status = validated.query.get("status")
    subscribers, total = await service.list_subscribers(
        SubscriptionStatus(status) if status else None,
        pagination.offset,
        pagination.limit,
    )
    return paginated_response(
        subscribers,
        total,
        pagination.page,
        pagination.limit,
        "Subscribers retrieved successfully",
    )


@router.get("/stats", response_model=Envelope, dependencies=ADMIN_ONLY)
async def get_stats(service: NewsletterServiceDep) -> Response:
    stats = await service.get_stats()
    return success_response(stats, "Stats retrieved successfully")
