from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine

from kzstats.config import Config
from kzstats.database.models import Base
from kzstats.utils.logger import setup_logger

class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url
        self.engine: Optional[AsyncEngine] = None
        self.async_session: Optional[async_sessionmaker] = None

    @property
    def session_factory(self) -> async_sessionmaker:
        if self.async_session is None:
            raise RuntimeError("Database.initialize() has not been called")
        return self.async_session

    async def initialize(self, create_tables: bool = False):
        """Initialize the connection pool, optionally creating the schema"""
        self.logger.info("Initializing database...")

        database_url = Config.get_async_database_url(self.database_url)

        engine_options = {'echo': Config.DEBUG, 'pool_pre_ping': True}
        if not database_url.startswith('sqlite'):
            # Bounded pool shared by all requests
            engine_options.update(
                pool_size=Config.DB_POOL_SIZE,
                max_overflow=Config.DB_MAX_OVERFLOW,
                pool_timeout=Config.DB_POOL_TIMEOUT,
            )

        self.engine = create_async_engine(database_url, **engine_options)

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        if create_tables:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            self.logger.info("Database schema created")

        self.logger.info("Database initialized successfully")

    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.async_session = None
            self.logger.info("Database connection closed")
