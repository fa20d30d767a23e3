"""GitHub App OAuth package for the login gateway"""

from typing import Optional

import httpx

from config import GatewayConfig
from .allowlist import RedirectAllowlist
from .errors import (
    ErrorKind,
    GatewayError,
    ProxyNetworkError,
    ProxyTargetError,
    StateError,
    UpstreamError,
    ValidationError,
)
from .models import InstallationList, TokenBundle
from .orchestrator import FlowOutcome, OAuthOrchestrator, Redirect
from .state_codec import StateCodec


def build_orchestrator(
    config: GatewayConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> OAuthOrchestrator:
    """Wire an orchestrator with its codec and allowlist from one configuration"""
    return OAuthOrchestrator(
        config,
        StateCodec(config.encryption_secret),
        RedirectAllowlist(config.redirect_allowlist),
        transport=transport,
    )


__all__ = [
    "ErrorKind",
    "FlowOutcome",
    "GatewayError",
    "InstallationList",
    "OAuthOrchestrator",
    "ProxyNetworkError",
    "ProxyTargetError",
    "Redirect",
    "RedirectAllowlist",
    "StateCodec",
    "StateError",
    "TokenBundle",
    "UpstreamError",
    "ValidationError",
    "build_orchestrator",
]
