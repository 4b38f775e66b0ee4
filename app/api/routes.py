"""
FastAPI routes for the TikTok OAuth gateway.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from pathlib import Path
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from app.clients.tiktok_auth import (
    OAuthConfigurationError,
    OAuthRequestValidationError,
    OAuthStateError,
    OAuthTokenExchangeError,
)
from app.core.config import APP_VERSION
from app.dependencies import (
    get_app_settings,
    get_oauth_state_service,
    get_tiktok_oauth_client,
    get_token_store_service,
    require_api_access,
)
from app.models.token import TokenRecord
from app.schemas import RefreshTokenRequest, StatusResponse, TokenGrant
from app.services.oauth_state import STATE_COOKIE_NAME, generate_state
from app.services.token_store import TokenNotFoundError, TokenStoreNotConfiguredError

_APP_DIR = Path(__file__).resolve().parents[1]

router = APIRouter()
templates = Jinja2Templates(directory=str(_APP_DIR / "templates"))
logger = logging.getLogger(__name__)

ENDPOINTS = ["/", "/callback", "/tokens", "/refresh", "/api/status"]


def render_error_page(
    request: Request,
    title: str,
    message: str,
    status_code: int = HTTPStatus.BAD_REQUEST,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "error.html",
        {"error_title": title, "error_message": message},
        status_code=status_code,
    )


def render_config_error_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "config_error.html",
        {},
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
    )


def render_not_found_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "not_found.html", {}, status_code=HTTPStatus.NOT_FOUND
    )


def _error_json(error: str, status_code: int, message: Optional[str] = None) -> JSONResponse:
    body = {"error": error}
    if message:
        body["message"] = message
    return JSONResponse(body, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
@router.get("/auth", response_class=HTMLResponse)
async def landing_page(
    request: Request,
    oauth_client: Annotated[Any, Depends(get_tiktok_oauth_client)],
    state_service: Annotated[Any, Depends(get_oauth_state_service)],
    settings: Annotated[Any, Depends(get_app_settings)],
) -> Response:
    """Render the page holding the TikTok authorization link."""
    state = generate_state()
    try:
        authorization_url = oauth_client.build_authorization_url(state=state)
    except OAuthConfigurationError:
        logger.error("Landing page requested without TIKTOK_CLIENT_KEY configured")
        return render_config_error_page(request)

    response = templates.TemplateResponse(
        request,
        "landing.html",
        {
            "authorization_url": authorization_url,
            "redirect_uri": settings.provider.redirect_uri,
            "scopes": settings.provider.scopes,
        },
    )
    if settings.security.verify_state:
        response.set_cookie(
            STATE_COOKIE_NAME,
            state_service.issue(state),
            max_age=state_service.ttl_seconds,
            httponly=True,
            secure=request.url.scheme == "https",
            samesite="lax",
        )
    return response


@router.get("/callback", response_class=HTMLResponse)
async def oauth_callback(
    request: Request,
    oauth_client: Annotated[Any, Depends(get_tiktok_oauth_client)],
    token_store: Annotated[Any, Depends(get_token_store_service)],
    state_service: Annotated[Any, Depends(get_oauth_state_service)],
    settings: Annotated[Any, Depends(get_app_settings)],
    code: Optional[str] = Query(None, description="Authorization code from TikTok."),
    state: Optional[str] = Query(None, description="Echoed CSRF state."),
    error: Optional[str] = Query(None),
    error_description: Optional[str] = Query(None),
) -> Response:
    """Complete the OAuth exchange, store the token and display it."""
    if error:
        logger.info("TikTok redirected with error %s", error)
        response = render_error_page(request, error, error_description or "")
        response.delete_cookie(STATE_COOKIE_NAME)
        return response
    if not code:
        return render_error_page(
            request, "No Code", "Authorization code not received from TikTok"
        )

    if settings.security.verify_state:
        try:
            state_service.verify(state, request.cookies.get(STATE_COOKIE_NAME))
        except OAuthStateError as exc:
            logger.warning("Rejected OAuth callback: %s", exc.message)
            return render_error_page(request, "Invalid State", exc.message)

    try:
        grant = await oauth_client.exchange_authorization_code(code)
    except OAuthConfigurationError:
        return render_config_error_page(request)
    except OAuthTokenExchangeError as exc:
        return render_error_page(request, "Token Exchange Failed", exc.message)

    record = TokenRecord.from_grant(grant)
    await run_in_threadpool(token_store.put, record)
    logger.info("Authorization completed for open_id %s", record.open_id)

    response = templates.TemplateResponse(
        request,
        "success.html",
        {
            "record": record,
            "record_data": record.model_dump(mode="json"),
            "expires_in_hours": record.expires_in // 3600,
        },
    )
    response.delete_cookie(STATE_COOKIE_NAME)
    return response


@router.get("/tokens", dependencies=[Depends(require_api_access)])
async def read_tokens(
    token_store: Annotated[Any, Depends(get_token_store_service)],
) -> Response:
    """Return the last stored token record."""
    try:
        record = await run_in_threadpool(token_store.get)
    except TokenStoreNotConfiguredError as exc:
        return _error_json(str(exc), HTTPStatus.NOT_IMPLEMENTED)
    except TokenNotFoundError as exc:
        return _error_json(str(exc), HTTPStatus.NOT_FOUND)
    return JSONResponse(record.model_dump(mode="json"))


@router.post("/refresh", dependencies=[Depends(require_api_access)])
async def refresh_token(
    request: Request,
    oauth_client: Annotated[Any, Depends(get_tiktok_oauth_client)],
    token_store: Annotated[Any, Depends(get_token_store_service)],
) -> Response:
    """
    Refresh an access token and relay TikTok's response as-is.

    A successful refresh also replaces the stored record.
    """
    try:
        payload = RefreshTokenRequest.model_validate(await request.json())
    except ValueError:
        payload = RefreshTokenRequest()
    if not payload.refresh_token:
        return _error_json("refresh_token required", HTTPStatus.BAD_REQUEST)

    try:
        provider_body = await oauth_client.refresh_access_token(payload.refresh_token)
    except OAuthRequestValidationError as exc:
        return _error_json(exc.message, HTTPStatus.BAD_REQUEST)
    except OAuthConfigurationError as exc:
        return _error_json(
            "Configuration Error", HTTPStatus.INTERNAL_SERVER_ERROR, exc.message
        )
    except OAuthTokenExchangeError as exc:
        return _error_json("Token refresh failed", HTTPStatus.BAD_GATEWAY, exc.message)

    if not provider_body.get("error"):
        try:
            grant = TokenGrant.model_validate(provider_body)
        except ValidationError:
            logger.info("Refresh response not in token shape; not storing it")
        else:
            await run_in_threadpool(token_store.put, TokenRecord.from_grant(grant))

    return JSONResponse(provider_body)


@router.get("/api/status", response_model=StatusResponse)
async def api_status(
    settings: Annotated[Any, Depends(get_app_settings)],
) -> StatusResponse:
    """Report liveness and configuration state."""
    return StatusResponse(
        status="operational",
        version=APP_VERSION,
        configured=settings.is_configured,
        kv_enabled=settings.kv_enabled,
        endpoints=ENDPOINTS,
    )


@router.get("/styles.css", include_in_schema=False)
async def stylesheet() -> FileResponse:
    return FileResponse(_APP_DIR / "static" / "styles.css", media_type="text/css")


__all__ = ["ENDPOINTS", "render_not_found_page", "router", "templates"]
