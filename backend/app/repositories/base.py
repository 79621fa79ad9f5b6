"""Common plumbing for repositories: session holding and storage error translation."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import StorageError

logger = logging.getLogger(__name__)


class Repository:
    """Base class holding the request's AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @property
    def dialect_name(self) -> str:
        return self.session.get_bind().dialect.name

    @asynccontextmanager
    async def _storage(self, operation: str) -> AsyncIterator[None]:
        """Translate driver/ORM failures inside the block into StorageError."""
        try:
            yield
        except SQLAlchemyError as e:
            logger.error("Storage failure in %s.%s: %s", type(self).__name__, operation, e)
            raise StorageError(
                context={"operation": operation, "error": str(e)},
            ) from e
