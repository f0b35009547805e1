"""Contact form endpoints."""

import uuid
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
from mutuals.core.constants import SubmissionStatus, SubmissionType, UserRole
from mutuals.domain.submissions import SubmissionService
from mutuals.infrastructure.database import DatabaseSession

SUBMISSION_ID_RULE = FieldRule(
    "id",
    location="path",
    required=True,
    format=Format.UUID,
    error="Invalid submission ID",
)

CONTACT_RULES = (
    FieldRule(
        "name",
        required=True,
        type="string",
        trim=True,
        max_length=255,
        error="Name is required",
        messages={"max_length": "Name must not exceed 255 characters"},
    ),
    FieldRule(
        "email",
        required=True,
        type="string",
        format=Format.EMAIL,
        trim=True,
        lowercase=True,
        error="Please provide a valid email",
    ),
    FieldRule(
        "subject",
        type="string",
        trim=True,
        max_length=500,
        error="Subject must not exceed 500 characters",
    ),
    FieldRule(
        "message", required=True, type="string", trim=True, error="Message is required"
    ),
    FieldRule(
        "submissionType",
        choices=tuple(SubmissionType),
        error="Invalid submission type",
    ),
)

LIST_RULES = (
    FieldRule(
        "status", location="query", choices=tuple(SubmissionStatus), error="Invalid status"
    ),
)

STATUS_RULES = (
    SUBMISSION_ID_RULE,
    FieldRule(
        "status",
        required=True,
        choices=tuple(SubmissionStatus),
        error="Invalid status",
        messages={"required": "Status is required"},
    ),
)

STAFF = [
    Depends(authenticate),
    Depends(require_roles(UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.EDITOR)),
]
ADMIN_ONLY = [
    Depends(authenticate),
    Depends(require_roles(UserRole.SUPER_ADMIN, UserRole.ADMIN)),
]

router = APIRouter(prefix="/submissions", tags=["submissions"], responses=ERROR_RESPONSES)


def get_submission_service(request: Request, db: DatabaseSession) -> SubmissionService:
    return SubmissionService(db, request.app.state.email_client)


SubmissionServiceDep = Annotated[SubmissionService, Depends(get_submission_service)]


@router.post(
    "/contact",
    status_code=201,
    response_model=Envelope,
    dependencies=[Depends(rate_limit("submissions"))],
)
async def create_contact_submission(
    validated: Annotated[ValidatedRequest, Depends(validate_request(*CONTACT_RULES))],
    service: SubmissionServiceDep,
) -> Response:
    body = validated.body
    submission = await service.create_contact(
        name=body["name"],
        email=body["email"],
        message=body["message"],
        subject=body.get("subject") or None,
        submission_type=(
            SubmissionType(body["submissionType"]) if "submissionType" in body else None
        ),
    )
    return created_response(submission, "Submission received successfully")


@router.get("/contact", response_model=Envelope, dependencies=STAFF)
async def list_contact_submissions(
    pagination: Pagination,
    validated: Annotated[ValidatedRequest, Depends(validate_request(*LIST_RULES))],
    service: SubmissionServiceDep,
) -> Response:
    status = validated.query.get("status")
    submissions, total = await service.list_contacts(
        SubmissionStatus(status) if status else None,
        pagination.offset,
        pagination.limit,
    )
    return paginated_response(
        submissions,
        total,
        pagination.page,
        pagination.limit,
        "Submissions retrieved successfully",
    )


@router.get("/contact/{id}", response_model=Envelope, dependencies=STAFF)
async def get_contact_submission(
    validated: Annotated[ValidatedRequest, Depends(validate_request(SUBMISSION_ID_RULE))],
    service: SubmissionServiceDep,
) -> Response:
    submission = await service.get_contact(uuid.UUID(validated.path["id"]))
    return success_response(submission, "Submission retrieved successfully")


@router.patch("/contact/{id}/status", response_model=Envelope, dependencies=STAFF)
async def update_contact_submission_status(
    validated: Annotated[ValidatedRequest, Depends(validate_request(*STATUS_RULES))],
    service: SubmissionServiceDep,
) -> Response:
    submission = await service.update_status(
        uuid.UUID(validated.path["id"]), SubmissionStatus(validated.body["status"])
    )
    return success_response(submission, "Submission status updated successfully")


@router.delete("/contact/{id}", response_model=Envelope, dependencies=ADMIN_ONLY)
async def delete_contact_submission(
    validated: Annotated[ValidatedRequest, Depends(validate_request(SUBMISSION_ID_RULE))],
    service: SubmissionServiceDep,
) -> Response:
    result = await service.delete_contact(uuid.UUID(validated.path["id"]))
    return success_response(result, "Submission deleted successfully")
