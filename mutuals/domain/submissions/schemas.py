"""Read schemas for contact form submissions."""

import uuid
from datetime import datetime

from mutuals.core.constants import SubmissionStatus, SubmissionType
from mutuals.domain.schemas import CamelModel


class SubmissionRead(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    subject: str | None
    message: str
    submission_type: SubmissionType
    status: SubmissionStatus
    created_at: datetime
    updated_at: datetime
