"""GitHub authorization, installation and return URL construction"""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit
from typing import Dict

from config import GatewayConfig


class AuthorizationURLBuilder:
    """Builds the URLs the browser is redirected to"""

    def __init__(self, config: GatewayConfig):
        self.config = config

    def get_authorize_url(self, state: str) -> str:
        """GitHub OAuth authorize URL for the configured App

        No redirect_uri is sent: GitHub falls back to the callback URL
        configured on the App itself.
        """
        params = {
            "client_id": self.config.client_id,
            "state": state,
        }
        return f"{self.config.authorize_url}?{urlencode(params)}"

    def get_install_url(self, state: str) -> str:
        """App installation page, carrying the state through unchanged"""
        return f"{self.config.install_url}?{urlencode({'state': state})}"


def with_query_params(url: str, params: Dict[str, str]) -> str:
    """Set query parameters on ``url``, replacing existing ones of the same name"""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in params]
    query.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))
