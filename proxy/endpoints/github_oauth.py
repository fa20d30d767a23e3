"""
GitHub App login endpoints: authorize, callback, install resume, refresh and
session unwrapping.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from oauth import OAuthOrchestrator, Redirect
from ..models import ErrorResponse, RefreshTokenRequest, SessionTokenRequest, SessionTokenResponse

logger = logging.getLogger(__name__)
router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Invalid parameter, redirect target or state"},
        500: {"model": ErrorResponse, "description": "GitHub rejected the request"},
        502: {"model": ErrorResponse, "description": "GitHub unreachable or returned an error"},
    }
)


def get_orchestrator(request: Request) -> OAuthOrchestrator:
    return request.app.state.orchestrator


def _redirect(redirect: Redirect) -> RedirectResponse:
    logger.debug(f"Flow outcome: {redirect.outcome.value}")
    return RedirectResponse(redirect.url, status_code=302)


@router.get("/authorize")
async def authorize(
    redirect_uri: Optional[str] = None,
    orchestrator: OAuthOrchestrator = Depends(get_orchestrator),
):
    """Unified entry point: validate the return URL and redirect to GitHub"""
    return _redirect(orchestrator.authorize(redirect_uri))


@router.get("/authorized")
async def authorized(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    error_description: Optional[str] = None,
    orchestrator: OAuthOrchestrator = Depends(get_orchestrator),
):
    """GitHub's callback: exchange the code, check installation, split new and returning users"""
    redirect = await orchestrator.callback(code, state, error=error, error_description=error_description)
    return _redirect(redirect)


@router.get("/installed")
async def installed(
    state: Optional[str] = None,
    installation_id: Optional[str] = None,
    setup_action: Optional[str] = None,
    orchestrator: OAuthOrchestrator = Depends(get_orchestrator),
):
    """App setup URL: resume login for the return URL carried in the state"""
    redirect = orchestrator.resume_installation(
        state,
        installation_id=installation_id,
        setup_action=setup_action,
    )
    return _redirect(redirect)


@router.post("/refresh-token")
async def refresh_token(
    body: RefreshTokenRequest,
    orchestrator: OAuthOrchestrator = Depends(get_orchestrator),
):
    """Refresh a GitHub user token; the client restarts the login flow on failure"""
    return await orchestrator.refresh(body.refreshToken)


@router.post("/token", response_model=SessionTokenResponse)
async def session_token(
    body: SessionTokenRequest,
    orchestrator: OAuthOrchestrator = Depends(get_orchestrator),
):
    """Turn a session artifact back into the raw GitHub token"""
    return SessionTokenResponse(token=orchestrator.unwrap_session(body.session))
