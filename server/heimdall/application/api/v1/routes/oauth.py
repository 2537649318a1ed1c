"""OAuth login flow routes: login redirect, provider callback and public key."""

import logging
from typing import Annotated
from urllib.parse import urlsplit

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import RedirectResponse

from heimdall.application.api.v1.errors import error_response
from heimdall.config import Config
from heimdall.domain.auth.command.login import (
    CompleteOAuth,
    CompleteOAuthHandler,
    InitiateLogin,
    InitiateLoginHandler,
)
from heimdall.domain.auth.service.token import TokenService
from heimdall.domain.shared.error import HeimdallError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/oauth", tags=["OAuth"], route_class=DishkaRoute)


def _secure_cookies(config: Config) -> bool:
    """Cookies are Secure unless the application itself is served over plain http."""
    return urlsplit(config.app_url).scheme != "http"


def _clear_flow_cookie(response: Response, config: Config) -> None:
    response.delete_cookie(
        config.auth.session.cookie_name,
        path="/",
        secure=_secure_cookies(config),
        httponly=True,
        samesite="lax",
    )


@router.get("/login/{provider_id}")
async def initiate_login(
    request: Request,
    provider_id: str,
    config: FromDishka[Config],
    handler: FromDishka[InitiateLoginHandler],
    return_to: Annotated[str | None, Query(alias="return")] = None,
) -> Response:
    """Start a login: redirect to the provider and bind a flow session to this browser."""
    session_cookie = config.auth.session.cookie_name
    result = await handler.run(
        InitiateLogin(
            provider_id=provider_id,
            return_to=return_to,
            previous_session_key=request.cookies.get(session_cookie),
        )
    )

    response = RedirectResponse(url=result.authorization_url, status_code=302)
    response.set_cookie(
        session_cookie,
        result.session_key,
        max_age=config.auth.session.ttl_seconds,
        path="/",
        secure=_secure_cookies(config),
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/callback/{provider_type}/{provider_id}")
async def handle_oauth_callback(
    request: Request,
    provider_type: str,
    provider_id: str,
    config: FromDishka[Config],
    handler: FromDishka[CompleteOAuthHandler],
    code: Annotated[str | None, Query()] = None,
    state: Annotated[str | None, Query()] = None,
    error: Annotated[str | None, Query()] = None,
    error_description: Annotated[str | None, Query()] = None,
) -> Response:
    """Finish a login: verify the callback, set the credential cookie and redirect back."""
    try:
        result = await handler.run(
            CompleteOAuth(
                provider_type=provider_type,
                provider_id=provider_id,
                state=state,
                code=code,
                error=error,
                error_description=error_description,
                session_key=request.cookies.get(config.auth.session.cookie_name),
            )
        )
    except HeimdallError as e:
        # The flow session is gone either way; drop the browser's reference too
        response = error_response(e)
        _clear_flow_cookie(response, config)
        return response

    cookie = result.cookie
    response = RedirectResponse(url=result.return_to, status_code=302)
    response.set_cookie(
        cookie.name,
        cookie.value,
        max_age=cookie.max_age,
        path=cookie.path,
        domain=cookie.domain,
        secure=cookie.secure,
        httponly=cookie.httponly,
        samesite=cookie.samesite,
    )
    _clear_flow_cookie(response, config)
    return response


@router.get("/public-key")
async def get_public_key(token_service: FromDishka[TokenService]) -> Response:
    """The PEM public key relying parties use to verify session tokens."""
    return Response(
        content=token_service.public_key_material(),
        media_type="application/x-pem-file",
    )
