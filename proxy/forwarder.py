"""
Transparent reverse HTTP forwarder behind the /proxy endpoint.

The forwarder relays one request to a caller-chosen absolute URL, follows
redirects itself and hands back the upstream response with the target's
framing and browser security policy headers removed. There is no egress
allowlist: access control happens at ingress (CORS).
"""
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Iterable, List, Optional, Tuple, Union
from urllib.parse import urlsplit

import httpx

from oauth.errors import ProxyNetworkError, ProxyTargetError

logger = logging.getLogger(__name__)

# Verbs that never carry a request body, whatever the client sent
BODYLESS_METHODS = frozenset({"GET", "HEAD"})

# Origin would make some targets reject the call as cross-origin; httpx sets
# Host, Content-Length and Transfer-Encoding for the outgoing request itself
STRIPPED_REQUEST_HEADERS = frozenset({"origin", "host", "content-length", "transfer-encoding"})

# The gateway's own CORS policy is authoritative, not the target's
SCRUBBED_RESPONSE_HEADERS = frozenset({
    "content-security-policy",
    "x-frame-options",
    "access-control-allow-origin",
})

# Re-framed by the server relaying the stream
HOP_BY_HOP_RESPONSE_HEADERS = frozenset({"transfer-encoding", "connection", "keep-alive"})

# Raw byte pairs pass non-ASCII values through untouched; str pairs are accepted too
HeaderName = Union[str, bytes]
HeaderPairs = Iterable[Tuple[HeaderName, Union[str, bytes]]]
Headers = List[Tuple[HeaderName, Union[str, bytes]]]


@dataclass
class ForwardedResponse:
    """Upstream response ready to be relayed; aclose() must run once the body is sent"""

    status_code: int
    headers: List[Tuple[bytes, bytes]]
    _response: httpx.Response
    _client: httpx.AsyncClient

    async def body(self) -> AsyncIterator[bytes]:
        """Raw upstream bytes, content encoding untouched; closes the upstream when done"""
        try:
            async for chunk in self._response.aiter_raw():
                yield chunk
        finally:
            await self.aclose()

    async def aclose(self):
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()


def effective_method(inbound_method: str, override: Optional[str] = None) -> str:
    """Method sent upstream: the explicit override if given, else the inbound one"""
    return (override or inbound_method).upper()


def needs_body(method: str) -> bool:
    return method.upper() not in BODYLESS_METHODS


def parse_target(target_url: Optional[str]) -> str:
    """Validate the proxy target

    Raises:
        ProxyTargetError: Missing or not an absolute http(s) URL
    """
    if not target_url:
        raise ProxyTargetError('Missing "url" query parameter.')
    try:
        parts = urlsplit(target_url)
        # .port raises ValueError when the port is not a number in range
        absolute = parts.scheme in ("http", "https") and bool(parts.hostname) and parts.port != 0
    except ValueError:
        absolute = False
    if not absolute:
        raise ProxyTargetError("Invalid target URL format.")
    return target_url


def _lower_name(name: HeaderName) -> str:
    if isinstance(name, bytes):
        name = name.decode("latin-1")
    return name.lower()


def outgoing_headers(headers: HeaderPairs) -> Headers:
    return [(name, value) for name, value in headers if _lower_name(name) not in STRIPPED_REQUEST_HEADERS]


def scrub_response_headers(headers: HeaderPairs) -> Headers:
    dropped = SCRUBBED_RESPONSE_HEADERS | HOP_BY_HOP_RESPONSE_HEADERS
    return [(name, value) for name, value in headers if _lower_name(name) not in dropped]


class ReverseProxyForwarder:
    """Relays requests to arbitrary absolute URLs

    Args:
        timeout: Total timeout for one forwarded request
        connect_timeout: Timeout for establishing the connection
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        timeout: float = 60.0,
        connect_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = httpx.Timeout(timeout, connect=connect_timeout)
        self._transport = transport

    async def forward(
        self,
        method: str,
        target_url: str,
        headers: HeaderPairs,
        body: Optional[bytes] = None,
    ) -> ForwardedResponse:
        """Send one request upstream and return the scrubbed, still-streaming response

        Args:
            method: Effective method (already resolved from any override)
            target_url: Absolute target URL
            headers: Inbound request headers as raw byte pairs
            body: Raw request body; ignored for GET and HEAD

        Raises:
            ProxyTargetError: target_url is not an absolute URL
            ProxyNetworkError: The upstream could not be reached
        """
        target_url = parse_target(target_url)
        method = method.upper()
        content = (body or b"") if needs_body(method) else None

        client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.timeout,
            transport=self._transport,
        )
        try:
            request = client.build_request(
                method,
                target_url,
                headers=outgoing_headers(headers),
                content=content,
            )
        except httpx.InvalidURL:
            await client.aclose()
            raise ProxyTargetError("Invalid target URL format.")

        logger.debug(f"Forwarding {method} to {request.url.scheme}://{request.url.host}")
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            logger.error(f"Fetch error: {type(e).__name__}: {e}")
            raise ProxyNetworkError(f"Failed to fetch target URL: {e}")

        relayed = scrub_response_headers(response.headers.raw)
        logger.debug(
            f"[Proxy Response] Status: {response.status_code}, "
            f"Headers: {len(response.headers)} received, {len(relayed)} relayed"
        )
        return ForwardedResponse(
            status_code=response.status_code,
            headers=relayed,
            _response=response,
            _client=client,
        )
