"""Echoveil companion client: characters, campaigns and combat against the game server."""

__version__ = "0.1.0"
