"""
Gateway client configuration.

The client carries two kinds of traffic: RPC calls that each hold up to
one base64-encoded part, and object retrieval (HEAD, byte ranges, whole
objects) for inspection. They get separate timeout budgets.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Union
import ssl

import aiohttp

DEFAULT_ENDPOINT = 'http://localhost:8000/functions/uploadToS3'


@dataclass
class TimeoutConfig:
    """
    Timeouts in seconds (None removes the bound).

    Attributes:
        rpc: Whole start/upload/complete call, including a full part body
        retrieval: Whole object download; None because archives can be GBs
        connect: Connection establishment, for every request
        sock_read: Longest gap between two reads, for every request
    """
    rpc: Optional[float] = 300.0
    retrieval: Optional[float] = None
    connect: float = 30.0
    sock_read: float = 120.0

    def for_rpc(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.rpc, connect=self.connect, sock_read=self.sock_read)

    def for_retrieval(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(
            total=self.retrieval,
            connect=self.connect,
            sock_read=self.sock_read
        )


@dataclass
class GatewayConfig:
    """
    Gateway client configuration.

    The bearer token is absent on purpose: it is passed explicitly on
    every gateway call.
    """
    endpoint: str = DEFAULT_ENDPOINT
    user_agent: str = 'archivepy/1.0.0'

    # Proxy URL; credentials, if any, go in the URL itself
    proxy: Optional[str] = None

    verify_ssl: bool = True
    ca_file: Optional[str] = None

    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    extra_headers: Dict[str, str] = field(default_factory=dict)

    # Parts go one at a time by default; a few extra slots cover the
    # worker pool and concurrent range reads.
    limit_per_host: int = 8

    @classmethod
    def default(cls) -> 'GatewayConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def insecure(cls, **kwargs) -> 'GatewayConfig':
        """Configuration with certificate verification disabled (local gateways)."""
        return cls(verify_ssl=False, **kwargs)

    def ssl_context(self) -> Union[ssl.SSLContext, bool]:
        """SSL context for the connector (False disables verification)."""
        if not self.verify_ssl:
            return False
        return ssl.create_default_context(cafile=self.ca_file)

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit_per_host': self.limit_per_host,
            'ssl': self.ssl_context(),
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession (RPC timeout is the default)."""
        return {
            'headers': {'User-Agent': self.user_agent, **self.extra_headers},
            'timeout': self.timeout.for_rpc(),
        }
