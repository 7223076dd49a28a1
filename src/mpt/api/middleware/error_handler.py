"""
Error Handler Middleware

Request-scoped correlation ids and a uniform 500 body for
failures that escape the endpoints. Errors inside an open event
stream are reported as ``error`` frames by the orchestrator instead.
"""

import time
import traceback
from uuid import uuid4

from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from mpt.config.logging_config import bind_correlation_id, clear_context, get_logger

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Correlation and failure boundary for every request.

    The correlation id is taken from the incoming header when present,
    bound to the log context and echoed on the response. For event
    streams the handler returns as soon as headers are ready; the body
    keeps streaming after the context is cleared.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid4())
        bind_correlation_id(correlation_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed before a response was produced",
                path=request.url.path,
                method=request.method,
                error_type=type(e).__name__,
                error_message=str(e),
                traceback=traceback.format_exc(),
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "correlation_id": correlation_id,
                    "message": "An unexpected error occurred. Please try again.",
                },
                headers={CORRELATION_HEADER: correlation_id},
            )
        else:
            response.headers[CORRELATION_HEADER] = correlation_id
            logger.debug(
                "Request handled",
                path=request.url.path,
                method=request.method,
                status_code=response.status_code,
                streaming=response.headers.get("content-type", "").startswith("text/event-stream"),
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            return response
        finally:
            clear_context()


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Malformed request bodies answer 400 with the validation details."""
    logger.info(
        "Request validation failed",
        path=request.url.path,
        error_count=len(exc.errors()),
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request",
            "details": jsonable_encoder(exc.errors()),
        },
    )
