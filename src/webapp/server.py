"""
HTTP server bootstrap for the GitHub login demo.

Binds the listening socket up front so the port actually bound (relevant when
port 0 asks for an ephemeral one) can be logged, then hands the socket to
uvicorn.
"""

import os
import socket
import sys
from typing import List, Optional

import uvicorn

from ..shared.config import ConfigurationError, Settings
from ..shared.logging_utils import OAuthLogger, ComponentType
from .main import create_app

logger = OAuthLogger(ComponentType.SYSTEM.value)


def bind_socket(host: str, port: int) -> socket.socket:
    """
    Bind a TCP socket for the server.

    Args:
        host: Interface to bind
        port: Port to bind, 0 for an ephemeral port

    Returns:
        socket.socket: Bound socket, inheritable so uvicorn can serve on it
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


def run(settings: Settings) -> None:
    """Bind the configured port and serve the app until the process is stopped."""
    app = create_app(settings)

    sock = bind_socket(settings.host, settings.port)
    actual_port = sock.getsockname()[1]

    logger.log_startup(actual_port, {
        "host": settings.host,
        "callback_url": settings.callback_url,
        "scope": settings.scope
    })

    config = uvicorn.Config(app, log_level="info")
    server = uvicorn.Server(config)
    server.run(sockets=[sock])


def main(argv: Optional[List[str]] = None) -> None:
    """Command line entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Serve the GitHub OAuth2 login demo"
    )
    parser.add_argument(
        "--host",
        help="Interface to bind (default: HOST or 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port to bind (default: PORT or 8080, 0 for ephemeral)"
    )

    args = parser.parse_args(argv)

    env = dict(os.environ)
    if args.host is not None:
        env["HOST"] = args.host
    if args.port is not None:
        env["PORT"] = str(args.port)

    try:
        settings = Settings.from_env(env)
    except ConfigurationError as e:
        logger.log_error("configuration_error", str(e))
        sys.exit(1)

    run(settings)


if __name__ == "__main__":
    main()
