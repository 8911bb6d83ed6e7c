"""Upload gateway API module."""
from .config import GatewayConfig, TimeoutConfig, DEFAULT_ENDPOINT
from .async_client import AsyncGatewayClient

__all__ = [
    # Async client
    'AsyncGatewayClient',

    # Configuration
    'GatewayConfig',
    'TimeoutConfig',
    'DEFAULT_ENDPOINT',
]
