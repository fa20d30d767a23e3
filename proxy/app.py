"""
FastAPI application initialization and configuration.
"""
import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config import GatewayConfig
from oauth import ErrorKind, GatewayError, build_orchestrator
from .cors import install_cors
from .endpoints import github_oauth_router, health_router, reverse_proxy_router
from .forwarder import ReverseProxyForwarder
from .middleware import log_requests_middleware

logger = logging.getLogger(__name__)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Render every gateway error as ``{"error", "kind"}``"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind.value}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.kind.value}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are validation errors (400), not 422s"""
    return JSONResponse(
        status_code=400,
        content={"error": "Request body is not valid JSON for this endpoint.", "kind": ErrorKind.VALIDATION.value},
    )


def create_app(
    config: Optional[GatewayConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the gateway application

    Args:
        config: Gateway configuration; loaded from settings when omitted
        transport: Optional httpx transport shared by GitHub calls and the proxy
    """
    config = config or GatewayConfig.from_settings()
    orchestrator = build_orchestrator(config, transport=transport)

    app = FastAPI(title="GitHub App Login Gateway", version="1.0.0")
    app.state.config = config
    app.state.orchestrator = orchestrator
    app.state.forwarder = ReverseProxyForwarder(
        timeout=config.upstream_timeout,
        connect_timeout=config.connect_timeout,
        transport=transport,
    )

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Add middleware
    app.middleware("http")(log_requests_middleware)
    install_cors(app, orchestrator.allowlist)

    # Register routers
    app.include_router(health_router)
    app.include_router(github_oauth_router, prefix=config.oauth_path_prefix)
    app.include_router(reverse_proxy_router)

    logger.debug(f"FastAPI application initialized for {len(orchestrator.allowlist)} allowed prefix(es)")
    return app
