"""GitHub App installation status lookup"""

import logging

import httpx

from config import GatewayConfig
from .errors import UpstreamError
from .models import InstallationList

logger = logging.getLogger(__name__)


async def has_app_installation(client: httpx.AsyncClient, config: GatewayConfig, access_token: str) -> bool:
    """Return True if the token's user has at least one installation of the App

    Raises:
        UpstreamError: When the installation listing cannot be fetched
    """
    logger.info("Checking user installation status...")
    headers = {
        "Authorization": f"Bearer {access_token}",
        "Accept": "application/vnd.github+json",
        "User-Agent": f"{config.app_slug} (github-login-gateway)",
    }

    try:
        response = await client.get(config.installations_url, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"Installation listing unreachable: {type(e).__name__}")
        raise UpstreamError("Failed to check app installation status: GitHub is unreachable.", status_code=502)

    if not response.is_success:
        logger.error(f"Failed to fetch user installations ({response.status_code}): {response.text[:500]}")
        raise UpstreamError(
            f"Failed to check app installation status (GitHub status {response.status_code})."
        )

    try:
        listing = InstallationList.model_validate(response.json())
    except ValueError:
        raise UpstreamError("Failed to check app installation status: unreadable response from GitHub.", status_code=502)

    logger.debug(f"User has {listing.total_count} installation(s)")
    return listing.has_installation
