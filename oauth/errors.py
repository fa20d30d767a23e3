"""Error taxonomy shared by the OAuth flow and the reverse proxy

Every error is terminal for the request that raised it. Messages must be
safe to show to the browser: no client secret, no tokens.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    STATE_MALFORMED = "state_malformed"
    STATE_TAMPERED = "state_tampered"
    STATE_EXPIRED = "state_expired"
    UPSTREAM = "upstream"
    PROXY_TARGET = "proxy_target"
    PROXY_NETWORK = "proxy_network"


class GatewayError(Exception):
    """Base class for errors rendered as ``{"error", "kind"}`` JSON bodies"""

    kind = ErrorKind.VALIDATION
    status_code = 400

    def __init__(self, message: str, kind: Optional[ErrorKind] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind.value}


class ValidationError(GatewayError):
    """Missing or malformed parameter, or a redirect target outside the allowlist"""


class StateError(GatewayError):
    """A state or session token could not be decoded"""

    kind = ErrorKind.STATE_MALFORMED

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.STATE_MALFORMED):
        if kind not in (ErrorKind.STATE_MALFORMED, ErrorKind.STATE_TAMPERED, ErrorKind.STATE_EXPIRED):
            raise ValueError(f"not a state error kind: {kind}")
        super().__init__(message, kind=kind)

    @property
    def expired(self) -> bool:
        return self.kind is ErrorKind.STATE_EXPIRED


class UpstreamError(GatewayError):
    """GitHub rejected or failed a server-to-server call"""

    kind = ErrorKind.UPSTREAM
    status_code = 500


class ProxyTargetError(GatewayError):
    """The proxy target is missing or not an absolute URL"""

    kind = ErrorKind.PROXY_TARGET


class ProxyNetworkError(GatewayError):
    """Forwarding to the proxy target failed at the transport level"""

    kind = ErrorKind.PROXY_NETWORK
    status_code = 502
