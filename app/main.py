"""
FastAPI application entrypoint for the TikTok OAuth gateway.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.middleware import CORSBoundaryMiddleware
from app.api.routes import render_not_found_page, router
from app.core.config import APP_VERSION, get_settings
from app.core.logging import configure_logging


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render unknown routes as HTML; other HTTP errors as JSON."""
    if exc.status_code == 404:
        return render_not_found_page(request)
    return JSONResponse(
        {"error": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="TikTok OAuth Gateway",
        version=APP_VERSION,
        description="Authorization-code flow, token storage and refresh for TikTok.",
    )
    app.add_middleware(CORSBoundaryMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.include_router(router)
    return app


app = create_app()

__all__ = ["app", "create_app"]
