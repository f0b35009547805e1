"""Contact form intake and review."""

import uuid

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from mutuals.core.constants import SubmissionStatus, SubmissionType
from mutuals.core.exceptions import NotFoundError, UpstreamError
from mutuals.domain.submissions.repository import ContactSubmissionRepository
from mutuals.domain.submissions.schemas import SubmissionRead
from mutuals.infrastructure.database.models import ContactSubmission
from mutuals.infrastructure.integrations import EmailClient

SUBMISSION_NOT_FOUND = "Submission not found"


class SubmissionService:
    """Contact submissions sent from the public site.

    Args:
        session: Request-scoped database session.
        email: Transactional email client for notifications.
    """

    def __init__(self, session: AsyncSession, email: EmailClient) -> None:
        self.submissions = ContactSubmissionRepository(session)
        self.email = email

    async def _get_or_404(self, submission_id: uuid.UUID) -> ContactSubmission:
        submission = await self.submissions.get_by_id(submission_id)
        if submission is None:
            raise NotFoundError(SUBMISSION_NOT_FOUND)
        return submission

    async def create_contact(
        self,
        *,
        name: str,
        email: str,
        message: str,
        subject: str | None = None,
        submission_type: SubmissionType | None = None,
    ) -> SubmissionRead:
        """Store a contact message, then notify the team and the sender."""
        submission = await self.submissions.create(
            ContactSubmission(
                name=name,
                email=email,
                subject=subject,
                message=message,
                submission_type=submission_type or SubmissionType.GENERAL,
                status=SubmissionStatus.NEW,
            )
        )
        result = SubmissionRead.model_validate(submission)

        try:
            await self.email.send_contact_notification(name, email, message, subject)
        except UpstreamError as e:
            logger.warning("Team notification for submission {} not sent: {}", result.id, e)
        try:
            await self.email.send_submission_confirmation(email, name, "contact")
        except UpstreamError as e:
            logger.warning("Confirmation for submission {} not sent: {}", result.id, e)

        return result

    async def list_contacts(
        self, status: SubmissionStatus | None, offset: int, limit: int
    ) -> tuple[list[SubmissionRead], int]:
        submissions, total = await self.submissions.list_by_status(status, offset, limit)
        return [SubmissionRead.model_validate(s) for s in submissions], total

    async def get_contact(self, submission_id: uuid.UUID) -> SubmissionRead:
        return SubmissionRead.model_validate(await self._get_or_404(submission_id))

    async def update_status(
        self, submission_id: uuid.UUID, status: SubmissionStatus
    ) -> SubmissionRead:
        submission = await self._get_or_404(submission_id)
        submission = await self.submissions.update(submission, {"status": status})
        return SubmissionRead.model_validate(submission)

    async def delete_contact(self, submission_id: uuid.UUID) -> dict[str, str]:
        if not await self.submissions.delete(submission_id):
            raise NotFoundError(SUBMISSION_NOT_FOUND)
        return {"message": "Submission deleted successfully"}
