"""
Server configuration.

Values come from command-line flags, with TWENTYONE_HOST / TWENTYONE_PORT /
TWENTYONE_LOG_LEVEL environment variables supplying the defaults.
"""

import argparse
import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class ServerConfig:
    """
    Runtime settings for the WebSocket server.

    Attributes:
        host: Interface to bind
        port: TCP port to bind
        log_level: Root logging level name
        remove_on_disconnect: Vacate a player's seat when their connection drops
    """

    host: str = "localhost"
    port: int = 8765
    log_level: str = "INFO"
    remove_on_disconnect: bool = False

    @staticmethod
    def build_parser() -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="twentyone-server", description="Two-player Twenty-One game server"
        )
        parser.add_argument(
            "--host",
            default=os.environ.get("TWENTYONE_HOST", "localhost"),
            help="Host to bind to",
        )
        parser.add_argument(
            "--port",
            type=int,
            default=int(os.environ.get("TWENTYONE_PORT", "8765")),
            help="Port to bind to",
        )
        parser.add_argument(
            "--log-level",
            default=os.environ.get("TWENTYONE_LOG_LEVEL", "INFO"),
            choices=["DEBUG", "INFO", "WARNING", "ERROR"],
            help="Logging level",
        )
        parser.add_argument(
            "--remove-on-disconnect",
            action="store_true",
            help="Free a player's seat as soon as their connection closes",
        )
        return parser

    @classmethod
    def from_args(cls, argv: Optional[List[str]] = None) -> "ServerConfig":
        """Parse command-line arguments into a config."""
        args = cls.build_parser().parse_args(argv)
        return cls(
            host=args.host,
            port=args.port,
            log_level=args.log_level.upper(),
            remove_on_disconnect=args.remove_on_disconnect,
        )
