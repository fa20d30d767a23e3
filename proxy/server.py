"""
GatewayServer class for CLI control of the FastAPI application.
"""
import logging
import os
from typing import Optional

import uvicorn
from rich.logging import RichHandler

from config import GatewayConfig
from settings import PORT, LOG_LEVEL, BIND_ADDRESS
from .app import create_app

logger = logging.getLogger(__name__)


class GatewayServer:
    """Gateway server wrapper for CLI control"""

    def __init__(
        self,
        debug: bool = False,
        bind_address: Optional[str] = None,
        port: Optional[int] = None,
        config: Optional[GatewayConfig] = None,
    ):
        self.debug = debug
        self.bind_address = bind_address or BIND_ADDRESS
        self.port = port or PORT
        self.config = config

        if debug:
            self._setup_debug_logging()

    def _setup_debug_logging(self):
        """Setup debug logging: rich console output plus an appended log file"""
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)

        # Clear existing handlers to avoid duplicates
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        log_file = os.path.abspath('gateway_debug.log')
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

        console_handler = RichHandler(rich_tracebacks=True, show_path=False)
        console_handler.setLevel(logging.DEBUG)

        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)

        # httpx logs full request URLs, which may carry tokens
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

        logger.info(f"Debug logging enabled - appending to {log_file}")

    def run(self):
        """Run the gateway server (blocking)"""
        config = self.config or GatewayConfig.from_settings()
        app = create_app(config)
        logger.info(f"Starting GitHub App login gateway on http://{self.bind_address}:{self.port}")
        prefix = config.oauth_path_prefix
        logger.info(f"Available endpoints: {prefix}/authorize, {prefix}/authorized, /proxy")
        uvicorn_config = uvicorn.Config(
            app,
            host=self.bind_address,
            port=self.port,
            log_level=LOG_LEVEL,
            access_log=False,  # the request middleware logs paths without query strings
        )
        uvicorn.Server(uvicorn_config).run()
