"""
FastAPI application factory.

The lifespan owns the database pool: it is initialized on startup, shared
by all requests through `app.state.services` and disposed on shutdown.
"""

import hmac
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from kzstats.api.responses import (
    error_response,
    stats_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from kzstats.api.router import api_router
from kzstats.config import Config
from kzstats.database.database import Database
from kzstats.services.registry import ServiceRegistry
from kzstats.utils.exceptions import StatsException

logger = logging.getLogger(__name__)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        database: Database to serve from; a default one built from Config is
            used when omitted. It is initialized and closed by the app.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting stats API...")
        db = database or Database()
        await db.initialize()
        app.state.db = db
        app.state.services = ServiceRegistry.from_session_factory(db.session_factory)
        logger.info("Stats API ready")
        try:
            yield
        finally:
            logger.info("Shutting down stats API...")
            await db.close()

    app = FastAPI(title="KZ Stats API", lifespan=lifespan)

    @app.middleware("http")
    async def _token_guard_middleware(request: Request, call_next):
        """Require the shared secret header on API routes when API_TOKEN is set."""
        required_token = (Config.API_TOKEN or "").strip()
        if not required_token or not request.url.path.startswith("/api/"):
            return await call_next(request)

        provided = (request.headers.get(Config.API_TOKEN_HEADER) or "").strip()
        if not hmac.compare_digest(provided.encode(), required_token.encode()):
            logger.warning(f"Rejected request to {request.url.path}: bad {Config.API_TOKEN_HEADER}")
            return error_response(401, f"Unauthorized: invalid {Config.API_TOKEN_HEADER}")

        return await call_next(request)

    app.add_exception_handler(StatsException, stats_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router)
    return app
