"""
Generic reverse proxy endpoint.

ANY /proxy?url=<absolute target>&method=<override>

The override exists for clients that cannot issue WebDAV verbs natively.
Whether the inbound body is read depends on the effective method, not the
method the client actually used.
"""
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ..cors import ALLOWED_METHODS
from ..forwarder import ReverseProxyForwarder, effective_method, needs_body, parse_target
from ..logging_utils import log_proxy_request
from ..models import ErrorResponse

logger = logging.getLogger(__name__)
router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid target URL"},
        502: {"model": ErrorResponse, "description": "Target could not be reached"},
    }
)


def get_forwarder(request: Request) -> ReverseProxyForwarder:
    return request.app.state.forwarder


@router.api_route("/proxy", methods=ALLOWED_METHODS)
async def reverse_proxy(
    request: Request,
    url: Optional[str] = None,
    method: Optional[str] = None,
    forwarder: ReverseProxyForwarder = Depends(get_forwarder),
):
    """Relay the request to ``url`` and stream back the scrubbed response"""
    request_id = str(uuid.uuid4())[:8]
    target_url = parse_target(url)
    forward_method = effective_method(request.method, method)

    body = await request.body() if needs_body(forward_method) else None
    log_proxy_request(request_id, forward_method, target_url, request.headers.items(), body is not None)

    upstream = await forwarder.forward(forward_method, target_url, request.headers.raw, body)
    logger.debug(f"[{request_id}] Upstream answered {upstream.status_code}")

    try:
        response = StreamingResponse(upstream.body(), status_code=upstream.status_code)
        response.raw_headers = [(name.lower(), value) for name, value in upstream.headers]
    except Exception:
        await upstream.aclose()
        raise
    return response
