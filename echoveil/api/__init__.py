"""Game server client."""

from .gateway_client import GatewayClient

__all__ = ["GatewayClient"]
