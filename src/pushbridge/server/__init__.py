"""HTTP server for pushbridge."""

from pushbridge.server.app import BridgeServer, create_app
from pushbridge.server.runner import ServerRunner

__all__ = [
    "BridgeServer",
    "ServerRunner",
    "create_app",
]
