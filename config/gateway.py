"""Immutable gateway configuration handed to every component at construction"""

import logging
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .loader import load_redirect_allowlist

logger = logging.getLogger(__name__)


class GatewayConfig(BaseModel):
    """Snapshot of the settings the gateway needs at runtime.

    Built once at process start (see from_settings) and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str
    encryption_secret: str
    app_slug: str
    redirect_allowlist: List[str]

    state_ttl_seconds: int = 3600
    session_ttl_seconds: int = 31536000
    credential_delivery: Literal["query", "session"] = "query"
    oauth_path_prefix: str = ""

    authorize_url: str = "https://github.com/login/oauth/authorize"
    token_url: str = "https://github.com/login/oauth/access_token"
    installations_url: str = "https://api.github.com/user/installations"
    install_url_template: str = "https://github.com/apps/{slug}/installations/new"

    upstream_timeout: float = 60.0
    connect_timeout: float = 10.0

    @field_validator("client_id", "client_secret", "encryption_secret", "app_slug")
    @classmethod
    def _required(cls, value: str, info) -> str:
        if not value:
            raise ValueError(f"{info.field_name} must be set")
        return value

    @field_validator("redirect_allowlist")
    @classmethod
    def _non_empty_allowlist(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("redirect_allowlist must contain at least one URL prefix")
        return value

    @field_validator("oauth_path_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = "/" + value
        return value

    @property
    def install_url(self) -> str:
        return self.install_url_template.format(slug=self.app_slug)

    def __repr__(self) -> str:
        # Secrets stay out of logs and tracebacks
        return (
            f"GatewayConfig(client_id={self.client_id!r}, app_slug={self.app_slug!r}, "
            f"redirect_allowlist={self.redirect_allowlist!r}, "
            f"credential_delivery={self.credential_delivery!r})"
        )

    __str__ = __repr__

    @classmethod
    def from_settings(cls, allowlist_path: Optional[str] = None) -> "GatewayConfig":
        """Build the configuration from settings.py (environment, .env, defaults)"""
        import settings

        allowlist = list(settings.REDIRECT_ALLOWLIST)
        if not allowlist:
            allowlist = load_redirect_allowlist(allowlist_path or settings.REDIRECT_ALLOWLIST_FILE or None)

        config = cls(
            client_id=settings.GITHUB_CLIENT_ID,
            client_secret=settings.GITHUB_CLIENT_SECRET,
            encryption_secret=settings.ENCRYPTION_SECRET,
            app_slug=settings.GITHUB_APP_SLUG,
            redirect_allowlist=allowlist,
            state_ttl_seconds=settings.STATE_TTL_SECONDS,
            session_ttl_seconds=settings.SESSION_TTL_SECONDS,
            credential_delivery=settings.CREDENTIAL_DELIVERY,
            oauth_path_prefix=settings.OAUTH_PATH_PREFIX,
            authorize_url=settings.GITHUB_AUTHORIZE_URL,
            token_url=settings.GITHUB_TOKEN_URL,
            installations_url=settings.GITHUB_INSTALLATIONS_URL,
            install_url_template=settings.GITHUB_INSTALL_URL_TEMPLATE,
            upstream_timeout=settings.UPSTREAM_TIMEOUT,
            connect_timeout=settings.CONNECT_TIMEOUT,
        )
        logger.debug(f"Gateway configuration loaded: {config}")
        return config
