"""
HTTP middleware: permissive CORS headers and the last-resort error boundary.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class CORSBoundaryMiddleware(BaseHTTPMiddleware):
    """
    Attach CORS headers to every response.

    ``OPTIONS`` requests are answered directly with an empty body. Exceptions
    escaping the routes become a generic 500 JSON body; details only go to the
    log.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=HTTPStatus.NO_CONTENT, headers=CORS_HEADERS)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error serving %s %s", request.method, request.url.path
            )
            response = JSONResponse(
                {
                    "error": "Internal Server Error",
                    "message": "An unexpected error occurred.",
                },
                status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            )

        response.headers.update(CORS_HEADERS)
        return response


__all__ = ["CORS_HEADERS", "CORSBoundaryMiddleware"]
