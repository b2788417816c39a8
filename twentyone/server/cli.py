"""
Command-line entry point for the Twenty-One WebSocket server.
"""

import asyncio
import logging
from typing import List, Optional

from twentyone.config import ServerConfig
from twentyone.server.websocket import WebSocketServer

logger = logging.getLogger("twentyone.server")


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, configure logging and serve until interrupted."""
    config = ServerConfig.from_args(argv)

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    server = WebSocketServer(config)
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0
