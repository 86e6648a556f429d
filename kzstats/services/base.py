"""
Base service class for the stats API.

Provides async database session management and translation of store
failures into `StoreError` for all service layer operations.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from kzstats.config import Config
from kzstats.utils.exceptions import InvalidIdentityError, StoreError

logger = logging.getLogger(__name__)

class BaseService:
    """Base class for all services with async database session management."""

    def __init__(self, session_factory):
        """
        Initialize base service with session factory.

        Args:
            session_factory: Async session factory from Database class
        """
        self.session_factory = session_factory

    @asynccontextmanager
    async def get_session(self, operation: str = "query") -> AsyncGenerator[AsyncSession, None]:
        """Provide a read-only session scope; store failures surface as StoreError."""
        session = self.session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(f"Database error during {operation}: {e}", exc_info=True)
            await session.rollback()
            raise StoreError(operation, str(e)) from e
        finally:
            await session.close()

    @staticmethod
    def clamp_limit(limit) -> int:
        """Apply the default limit and cap it at MAX_LIMIT."""
        if limit is None:
            return Config.DEFAULT_LIMIT
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidIdentityError(limit, f"a positive limit (at most {Config.MAX_LIMIT})")
        return min(limit, Config.MAX_LIMIT)
