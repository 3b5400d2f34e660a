"""
Exception handlers mapping domain errors onto HTTP responses.

Not-found errors are answered with a short plain-text body. A partially
completed cascade delete is reported as JSON listing what was removed.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from project_api.errors import CascadeDeleteError, ProjectApiError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register domain error handlers on the FastAPI app."""

    @app.exception_handler(CascadeDeleteError)
    async def cascade_delete_error_handler(request: Request, exc: CascadeDeleteError):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.message,
                "id": exc.project_id,
                "removed": exc.removed,
                "failed": exc.failed,
            },
        )

    @app.exception_handler(ProjectApiError)
    async def project_api_error_handler(request: Request, exc: ProjectApiError):
        logger.info("%s on %s %s", exc.message, request.method, request.url.path)
        return PlainTextResponse(exc.message, status_code=exc.status_code)
