"""
Response envelope and error mapping for the HTTP layer.

Successful responses are `{"result": ..., "took": <nanoseconds>}`. Errors
carry only `{"result": "<message>"}`; a query that matched nothing answers
204 with no body.
"""

import logging
import time
from typing import Any, Dict

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from kzstats.utils.exceptions import (
    InvalidDateRangeError, InvalidIdentityError, NotFoundError, StatsException, StoreError
)

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong. Please try again later."


def envelope(result: Any, started_ns: int) -> Dict[str, Any]:
    return {"result": result, "took": time.perf_counter_ns() - started_ns}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"result": message})


async def stats_exception_handler(request: Request, exc: StatsException) -> Response:
    if isinstance(exc, NotFoundError):
        logger.debug(f"{request.url.path}: {exc}")
        return Response(status_code=204)

    if isinstance(exc, (InvalidIdentityError, InvalidDateRangeError)):
        logger.info(f"{request.url.path}: {exc}")
        return error_response(400, exc.user_message)

    if isinstance(exc, StoreError):
        logger.error(f"{request.url.path}: {exc}")
        return error_response(500, exc.user_message)

    logger.error(f"{request.url.path}: unhandled stats error {exc}", exc_info=exc)
    return error_response(500, GENERIC_ERROR)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    )
    logger.info(f"{request.url.path}: invalid request ({problems})")
    return error_response(400, f"Invalid request. {problems}")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unexpected error on {request.url.path}: {exc}", exc_info=exc)
    return error_response(500, GENERIC_ERROR)
