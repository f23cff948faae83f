"""Transactional access to the moderation tables with a bounded wait."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.services.errors import StorageError, StorageTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 5.0


class SessionStore:
    """Base for stores that run each operation in its own transaction.

    A unit of work either commits completely or rolls back; errors raised by
    the work itself (validation, not found) propagate unchanged.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.session_factory = session_factory
        self.timeout = timeout

    async def _run(self, action: str, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        try:
            return await asyncio.wait_for(self._transaction(work), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Storage timed out after %.1fs during %s", self.timeout, action)
            raise StorageTimeoutError(
                f"storage did not respond within {self.timeout:g}s", action=action,
            ) from exc
        except SQLAlchemyError as exc:
            logger.error("Storage failure during %s: %s", action, exc)
            raise StorageError(str(exc.__cause__ or exc), action=action) from exc

    async def _transaction(self, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with self.session_factory() as session:
            async with session.begin():
                return await work(session)
