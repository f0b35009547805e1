"""User persistence."""

from sqlalchemy.ext.asyncio import AsyncSession

from mutuals.infrastructure.database.models import User
from mutuals.infrastructure.database.repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        return await self.find_one_by(email=email)
