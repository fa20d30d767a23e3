"""GitHub App login flow: authorize, callback and the new/returning user split

Flow:
    START -> AWAIT_CALLBACK -> TOKEN_EXCHANGED -> INSTALLATION_CHECKED
          -> DASHBOARD_REDIRECT | INSTALL_REDIRECT

Nothing is stored server-side between the two legs. The return URL travels
inside the encrypted state token, so any replica can serve the callback.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from config import GatewayConfig
from .allowlist import RedirectAllowlist
from .authorization import AuthorizationURLBuilder, with_query_params
from .errors import ValidationError
from .installations import has_app_installation
from .state_codec import StateCodec
from .token_exchange import exchange_code
from .token_refresh import refresh_tokens

logger = logging.getLogger(__name__)

INVALID_REDIRECT_MSG = "redirect url not valid, it must start with one of the allowed prefixes."


class FlowOutcome(str, Enum):
    PROVIDER_REDIRECT = "provider_redirect"
    DASHBOARD_REDIRECT = "dashboard_redirect"
    INSTALL_REDIRECT = "install_redirect"
    ERROR_REDIRECT = "error_redirect"


@dataclass(frozen=True)
class Redirect:
    """Where to send the browser next, and which branch of the flow got us there"""

    url: str
    outcome: FlowOutcome


class OAuthOrchestrator:
    """Drives the GitHub App login flow

    Args:
        config: Gateway configuration
        codec: Codec for state and session tokens
        allowlist: Return URLs the gateway may redirect to
        transport: Optional httpx transport for the GitHub calls
    """

    def __init__(
        self,
        config: GatewayConfig,
        codec: StateCodec,
        allowlist: RedirectAllowlist,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.codec = codec
        self.allowlist = allowlist
        self.urls = AuthorizationURLBuilder(config)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(self.config.upstream_timeout, connect=self.config.connect_timeout)
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    def _require_allowed(self, return_url: Optional[str]) -> str:
        if not return_url:
            raise ValidationError("`redirect_uri` is required.")
        if not self.allowlist.is_allowed(return_url):
            logger.warning("Rejected return URL outside the allowlist")
            raise ValidationError(INVALID_REDIRECT_MSG)
        return return_url

    def authorize(self, return_url: Optional[str]) -> Redirect:
        """Validate the return URL and send the browser to GitHub"""
        return_url = self._require_allowed(return_url)
        state = self.codec.encode_for(return_url, self.config.state_ttl_seconds)
        logger.info("Redirecting user to GitHub for authorization...")
        return Redirect(self.urls.get_authorize_url(state), FlowOutcome.PROVIDER_REDIRECT)

    def _decode_return_url(self, state: str) -> str:
        return_url = self.codec.decode(state)
        logger.info("State validation successful.")
        # The allowlist may have changed since the token was minted
        return self._require_allowed(return_url)

    async def callback(
        self,
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
        error_description: Optional[str] = None,
    ) -> Redirect:
        """Handle GitHub's redirect back to the gateway

        Raises:
            ValidationError: Missing parameters or disallowed return URL
            StateError: State token malformed, tampered with or expired
            UpstreamError: Token exchange or installation check failed
        """
        if not state or (not code and not error):
            raise ValidationError('Missing "code" or "state" query parameter.')

        return_url = self._decode_return_url(state)

        if error:
            logger.info(f"GitHub reported an authorization error: {error}")
            params = {"error": error}
            if error_description:
                params["error_description"] = error_description
            return Redirect(with_query_params(return_url, params), FlowOutcome.ERROR_REDIRECT)

        async with self._client() as client:
            bundle = await exchange_code(client, self.config, code)
            installed = await has_app_installation(client, self.config, bundle.access_token)

        if installed:
            logger.info("User has installed the app. Redirecting to dashboard.")
            params = self._credential_params(bundle.to_client())
            return Redirect(with_query_params(return_url, params), FlowOutcome.DASHBOARD_REDIRECT)

        logger.info("User has not installed the app. Redirecting to installation page.")
        return Redirect(self.urls.get_install_url(state), FlowOutcome.INSTALL_REDIRECT)

    def _credential_params(self, bundle: Dict[str, Any]) -> Dict[str, str]:
        if self.config.credential_delivery == "session":
            ttl = self.config.session_ttl_seconds
            params = {"github_session": self.codec.encode_for(bundle["access_token"], ttl)}
            if bundle.get("refresh_token"):
                params["github_refresh_session"] = self.codec.encode_for(bundle["refresh_token"], ttl)
            return params
        return {"github_authorized": json.dumps(bundle)}

    def resume_installation(
        self,
        state: Optional[str],
        installation_id: Optional[str] = None,
        setup_action: Optional[str] = None,
    ) -> Redirect:
        """Continue login after the user installed the App

        GitHub sends the browser to the App's setup URL with the state we
        forwarded to the installation page. The original return URL is
        recovered and the authorize leg starts over for it.
        """
        if not state:
            raise ValidationError('Missing "state" query parameter.')
        return_url = self._decode_return_url(state)
        logger.info(f"App installation completed (action={setup_action}, installation={installation_id})")
        return self.authorize(return_url)

    async def refresh(self, refresh_token: Optional[str]) -> Dict[str, Any]:
        """Exchange a refresh token for a new token bundle"""
        if not refresh_token:
            raise ValidationError("invalid refresh token.")
        async with self._client() as client:
            bundle = await refresh_tokens(client, self.config, refresh_token)
        return bundle.to_client()

    def unwrap_session(self, session_token: Optional[str]) -> str:
        """Turn a session artifact back into the raw GitHub token"""
        if not session_token:
            raise ValidationError("`session` is required.")
        return self.codec.decode(session_token)
