"""
All-Server Backend — Upload Size Limit Middleware
===================================================

What:  Rejects an upload whose Content-Length is already over the limit.
How:   Runs before FastAPI parses (and spools) the multipart body, so an
       oversized request is answered with 400 without being read. Requests
       without a usable Content-Length fall through to the per-chunk size
       check in UploadService.
"""

import logging
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from allserver.exceptions import ValidationError

logger = logging.getLogger(__name__)


class UploadSizeLimitMiddleware(BaseHTTPMiddleware):
    """Content-Length gate in front of the upload routes."""

    def __init__(self, app, upload_paths: Iterable[str] = (), **kwargs):
        super().__init__(app, **kwargs)
        self.upload_paths = frozenset(upload_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method != "POST" or request.url.path not in self.upload_paths:
            return await call_next(request)

        try:
            request.app.state.upload_service.check_request_length(
                request.headers.get("content-length")
            )
        except ValidationError as exc:
            logger.warning(
                "Upload rejected before reading body: Content-Length=%s",
                request.headers.get("content-length"),
            )
            # Raised outside the app's exception handlers, so answer directly
            return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

        return await call_next(request)
