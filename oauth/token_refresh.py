"""GitHub OAuth token refresh functionality"""

import logging

import httpx

from config import GatewayConfig
from .models import TokenBundle
from .token_exchange import request_token

logger = logging.getLogger(__name__)


async def refresh_tokens(client: httpx.AsyncClient, config: GatewayConfig, refresh_token: str) -> TokenBundle:
    """Trade a refresh token for a fresh token bundle

    GitHub rotates the refresh token on every use, so the returned bundle
    carries a new one. On failure the client has to restart the authorize flow.
    """
    logger.info("Attempting to refresh GitHub user token...")
    bundle = await request_token(
        client,
        config,
        {"grant_type": "refresh_token", "refresh_token": refresh_token},
        "refresh access token",
    )
    logger.info("Successfully refreshed GitHub user token")
    return bundle
