"""Authentication routes for the provider sign-in flow."""

import logging
from typing import Annotated
from urllib.parse import urlencode

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from idlink.config import AuthConfig
from idlink.domain.auth.command.login import (
    CompleteLogin,
    CompleteLoginHandler,
    LoginOutcome,
    StartLogin,
    StartLoginHandler,
)
from idlink.domain.auth.command.register import (
    RequestRegistration,
    RequestRegistrationHandler,
)
from idlink.domain.auth.model.value import ConnectAction, DecisionKind, ReasonCode
from idlink.domain.auth.port.provider_registry import ProviderRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"], route_class=DishkaRoute)


class ProviderResponse(BaseModel):
    name: str
    label: str


class RegisterRequest(BaseModel):
    """Request body for registration with provider identity fields."""

    username: str
    email: str
    display_name: str = ""
    password_token: str
    comments: str = ""


class RegisterResponse(BaseModel):
    success: bool
    account_id: str | None = None
    reason: str | None = None
    message: str = ""


def local_url(url: str | None, default: str) -> str:
    """Accept only same-site paths as return URLs."""
    if url and url.startswith("/") and not url.startswith("//"):
        return url
    return default


def with_params(url: str, params: dict[str, str]) -> str:
    params = {k: v for k, v in params.items() if v}
    if not params:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode(params)}"


def outcome_response(request: Request, outcome: LoginOutcome, config: AuthConfig) -> Response:
    """Translate a LoginOutcome into the browser redirect."""
    return_url = local_url(outcome.return_url, config.frontend_url)

    if outcome.redirect_url is not None:
        return RedirectResponse(url=outcome.redirect_url, status_code=302)

    if not outcome.ok:
        return RedirectResponse(
            url=with_params(
                config.login_url,
                {
                    "reason": outcome.reason or "",
                    "message": outcome.message,
                    "url": return_url,
                    "scope": outcome.scope_id,
                },
            ),
            status_code=302,
        )

    if outcome.decision is DecisionKind.LOGIN and outcome.account_id is not None:
        request.session[config.caller_session_key] = outcome.account_id
        logger.info("Signed in account %s", outcome.account_id)

    if outcome.decision is DecisionKind.REGISTER and outcome.registration is not None:
        proposal = outcome.registration
        return RedirectResponse(
            url=with_params(
                config.register_url,
                {
                    "provider": proposal.provider_name,
                    "username": proposal.username,
                    "email": proposal.email,
                    "display_name": proposal.display_name,
                    "password_token": proposal.password_token,
                    "url": return_url,
                },
            ),
            status_code=302,
        )

    return RedirectResponse(url=return_url, status_code=302)


@router.get("/providers", response_model=list[ProviderResponse])
async def list_providers(
    registry: FromDishka[ProviderRegistry],
    registration: Annotated[bool, Query()] = False,
) -> list[ProviderResponse]:
    """List sign-in providers, sorted by label."""
    return [
        ProviderResponse(name=p.name, label=p.label)
        for p in registry.list_available(registration_only=registration)
    ]


@router.get("/login")
async def start_login(
    request: Request,
    config: FromDishka[AuthConfig],
    handler: FromDishka[StartLoginHandler],
    provider: Annotated[str, Query()],
    connect_action: Annotated[ConnectAction, Query()] = ConnectAction.NONE,
    url: Annotated[str | None, Query()] = None,
    scope: Annotated[str, Query()] = "",
) -> Response:
    """Start a sign-in, connect or disconnect request.

    Redirects to the identity provider's authorization page, or back to the
    application when nothing needs the provider.
    """
    outcome = await handler.run(
        StartLogin(
            provider=provider,
            connect_action=connect_action,
            return_url=local_url(url, config.frontend_url),
            scope_id=scope,
            caller_id=request.session.get(config.caller_session_key),
        )
    )
    return outcome_response(request, outcome, config)


@router.get("/callback")
async def handle_callback(
    request: Request,
    config: FromDishka[AuthConfig],
    handler: FromDishka[CompleteLoginHandler],
    code: Annotated[str, Query()] = "",
    state: Annotated[str, Query()] = "",
    error: Annotated[str, Query()] = "",
    error_description: Annotated[str, Query()] = "",
) -> Response:
    """Handle the identity provider's redirect back to the application."""
    outcome = await handler.run(
        CompleteLogin(
            code=code,
            state=state,
            error=error,
            error_description=error_description,
            caller_id=request.session.get(config.caller_session_key),
        )
    )
    return outcome_response(request, outcome, config)


_REGISTRATION_STATUS: dict[ReasonCode, int] = {
    ReasonCode.REGISTRATION_DISABLED: 403,
    ReasonCode.INSUFFICIENT_IDENTITY_DATA: 422,
}


@router.post("/register", response_model=RegisterResponse)
async def register(
    body: RegisterRequest,
    handler: FromDishka[RequestRegistrationHandler],
) -> Response:
    """Request a new account with identity fields received from a provider."""
    result = await handler.run(
        RequestRegistration(
            username=body.username,
            email=body.email,
            display_name=body.display_name,
            password_token=body.password_token,
            comments=body.comments,
        )
    )
    if result.success:
        status_code = 201
    elif result.reason is not None:
        status_code = _REGISTRATION_STATUS.get(result.reason, 400)
    else:
        status_code = 409
    response = RegisterResponse(
        success=result.success,
        account_id=result.account_id,
        reason=result.reason,
        message=result.message,
    )
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))
