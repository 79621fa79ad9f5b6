"""
SQL for the `user_settings` table.

The defaults row is created with INSERT ... ON CONFLICT (user_id) DO NOTHING
followed by a re-select, so two first reads racing for the same user both
end up with the single row instead of one of them hitting the unique
constraint.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite

from app.models.settings import UserSettings
from app.repositories.base import Repository


class SettingsRepository(Repository):

    async def _find(self, user_id: int) -> Optional[UserSettings]:
        result = await self.session.execute(
            select(UserSettings).where(UserSettings.user_id == user_id)
        )
        return result.scalar_one_or_none()

    def _insert_defaults(self, user_id: int):
        dialect = postgresql if self.dialect_name == "postgresql" else sqlite
        return (
            dialect.insert(UserSettings)
            .values(**UserSettings.default_values(user_id))
            .on_conflict_do_nothing(index_elements=["user_id"])
        )

    async def get_or_create(self, user_id: int) -> UserSettings:
        """Return the user's settings row, inserting one with defaults if absent."""
        async with self._storage("get_or_create"):
            row = await self._find(user_id)
            if row is not None:
                return row

            await self.session.execute(self._insert_defaults(user_id))
            row = await self._find(user_id)
            if row is None:
                raise RuntimeError(f"settings row for user {user_id} missing after insert")
            return row

    async def update(self, row: UserSettings, columns: Dict[str, Any]) -> UserSettings:
        async with self._storage("update"):
            for key, value in columns.items():
                setattr(row, key, value)
            row.updated_at = datetime.now()
            await self.session.flush()
            return row
