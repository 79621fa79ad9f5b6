"""Per-user preferences: created with defaults on first read, partially updatable."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.settings_repository import SettingsRepository
from app.schemas.settings import SettingsResponse, SettingsUpdateRequest

logger = logging.getLogger(__name__)


class SettingsService:

    def __init__(self, repository: SettingsRepository):
        self.repository = repository

    @classmethod
    def for_session(cls, session: AsyncSession) -> "SettingsService":
        return cls(SettingsRepository(session))

    async def get_settings(self, user_id: int) -> SettingsResponse:
        row = await self.repository.get_or_create(user_id)
        return SettingsResponse.from_model(row)

    async def update_settings(self, user_id: int, request: SettingsUpdateRequest) -> SettingsResponse:
        """Apply only the fields present in `request`; everything else keeps its value."""
        row = await self.repository.get_or_create(user_id)
        columns = request.to_columns()
        row = await self.repository.update(row, columns)
        logger.info("Updated settings for user %d (%s)", user_id, ", ".join(sorted(columns)) or "no fields")
        return SettingsResponse.from_model(row)
