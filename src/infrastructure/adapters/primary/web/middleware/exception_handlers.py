"""
Centralized exception handlers for FastAPI application.

This module maps agent domain exceptions to HTTP responses with a
consistent ``{"error": ..., "reason": ...}`` body.

Usage:
    from src.infrastructure.adapters.primary.web.middleware import configure_exception_handlers

    app = FastAPI()
    configure_exception_handlers(app)
"""

import logging
import uuid
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.domain.exceptions import (
    AgentBusyError,
    AgentError,
    DownstreamFailureError,
    MissingPreconditionError,
)

logger = logging.getLogger(__name__)


class ErrorResponse:
    """Standard error response format."""

    def __init__(
        self,
        status_code: int,
        error: str,
        reason: str | None = None,
        error_id: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.error = error
        self.reason = reason
        self.error_id = error_id or str(uuid.uuid4())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        response: dict[str, Any] = {"error": self.error}
        if self.reason:
            response["reason"] = self.reason
        return response

    def to_response(self) -> JSONResponse:
        """Create FastAPI JSONResponse."""
        return JSONResponse(
            status_code=self.status_code,
            content=self.to_dict(),
            headers={"X-Error-Id": self.error_id},
        )


async def missing_precondition_handler(
    request: Request, exc: MissingPreconditionError
) -> JSONResponse:
    """Handle bad or absent input - 400 Bad Request."""
    error_id = str(uuid.uuid4())
    logger.warning(
        "Missing precondition: %s - error_id=%s, path=%s",
        exc.message,
        error_id,
        request.url.path,
    )
    return ErrorResponse(
        status_code=400,
        error=exc.message,
        error_id=error_id,
    ).to_response()


async def downstream_failure_handler(
    request: Request, exc: DownstreamFailureError
) -> JSONResponse:
    """Handle chat platform / completion service failures - 500."""
    error_id = str(uuid.uuid4())
    logger.error(
        "Downstream failure: %s - error_id=%s, path=%s",
        exc,
        error_id,
        request.url.path,
        exc_info=exc.original_error,
    )
    return ErrorResponse(
        status_code=500,
        error=exc.summary,
        reason=exc.reason,
        error_id=error_id,
    ).to_response()


async def agent_busy_handler(request: Request, exc: AgentBusyError) -> JSONResponse:
    """Handle a duplicate start that escaped the service layer - 409 Conflict."""
    logger.info("Agent busy: %s - path=%s", exc.agent_id, request.url.path)
    return ErrorResponse(status_code=409, error=exc.message).to_response()


async def agent_error_handler(request: Request, exc: AgentError) -> JSONResponse:
    """Handle generic agent errors - 500."""
    error_id = str(uuid.uuid4())
    logger.error(
        "Agent error: %s - error_id=%s, path=%s",
        exc,
        error_id,
        request.url.path,
        exc_info=True,
    )
    return ErrorResponse(
        status_code=500,
        error=exc.message,
        reason=str(exc.original_error) if exc.original_error else None,
        error_id=error_id,
    ).to_response()


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Configure all exception handlers for the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    # Specific before generic
    app.add_exception_handler(MissingPreconditionError, missing_precondition_handler)
    app.add_exception_handler(DownstreamFailureError, downstream_failure_handler)
    app.add_exception_handler(AgentBusyError, agent_busy_handler)
    app.add_exception_handler(AgentError, agent_error_handler)

    logger.info("Configured %d exception handlers", 4)
