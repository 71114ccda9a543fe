"""HTTP adapter exposing the engine to the game server."""

from strangle.server.app import create_app

__all__ = ["create_app"]
