"""Contact submission persistence."""

from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from mutuals.core.constants import SubmissionStatus
from mutuals.infrastructure.database.models import ContactSubmission
from mutuals.infrastructure.database.repository import BaseRepository


class ContactSubmissionRepository(BaseRepository[ContactSubmission]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ContactSubmission)

    async def list_by_status(
        self, status: SubmissionStatus | None, offset: int, limit: int
    ) -> tuple[list[ContactSubmission], int]:
        conditions: list[ColumnElement[bool]] = []
        if status is not None:
            conditions.append(ContactSubmission.status == status)
        return await self.list_page(
            conditions, (ContactSubmission.created_at.desc(),), offset, limit
        )
