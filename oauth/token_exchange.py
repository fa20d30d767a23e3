"""GitHub OAuth token exchange functionality"""

import logging
from typing import Any, Dict

import httpx

from config import GatewayConfig
from utils.redaction import redact_text
from .errors import UpstreamError
from .models import TokenBundle

logger = logging.getLogger(__name__)

TOKEN_REQUEST_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


async def request_token(
    client: httpx.AsyncClient,
    config: GatewayConfig,
    grant: Dict[str, Any],
    action: str,
) -> TokenBundle:
    """POST a grant to GitHub's token endpoint and validate the answer

    Args:
        client: HTTP client to send the request with
        config: Gateway configuration holding the client credentials
        grant: Grant specific fields (code, or grant_type + refresh_token)
        action: Human readable description used in error messages

    Returns:
        TokenBundle with at least an access token

    Raises:
        UpstreamError: Transport failure, non-2xx status or an error body.
            The message never contains the client secret.
    """
    body = {
        "client_id": config.client_id,
        "client_secret": config.client_secret,
        **grant,
    }

    try:
        response = await client.post(config.token_url, json=body, headers=TOKEN_REQUEST_HEADERS)
    except httpx.HTTPError as e:
        logger.error(f"Token endpoint unreachable during {action}: {type(e).__name__}")
        raise UpstreamError(f"Failed to {action}: GitHub is unreachable.", status_code=502)

    if not response.is_success:
        logger.error(
            f"Failed to {action} ({response.status_code}): {redact_text(response.text)}"
        )
        raise UpstreamError(f"Failed to {action} (GitHub status {response.status_code}).")

    try:
        bundle = TokenBundle.model_validate(response.json())
    except ValueError:
        logger.error(f"Unreadable token response during {action}: {redact_text(response.text)}")
        raise UpstreamError(f"Failed to {action}: unreadable response from GitHub.", status_code=502)

    if bundle.error or not bundle.access_token:
        logger.error(f"Error in token response from GitHub during {action}: {bundle.error}")
        raise UpstreamError(f"GitHub returned an error: {bundle.error}", status_code=502)

    return bundle


async def exchange_code(client: httpx.AsyncClient, config: GatewayConfig, code: str) -> TokenBundle:
    """Exchange an authorization code for a user access token bundle"""
    logger.info("Exchanging code for access token...")
    bundle = await request_token(client, config, {"code": code}, "exchange code for access token")
    logger.info("Successfully obtained access token.")
    return bundle
