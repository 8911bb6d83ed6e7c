"""
Async upload gateway client.

Talks to the multipart object-store gateway over a single JSON RPC
endpoint and retrieves stored objects by URL, whole or by byte range.
"""
import asyncio
import json
from typing import Dict, Optional, Any, List
import aiohttp

from .config import GatewayConfig
from ..exceptions import GatewayError
from ..logging import get_logger


class AsyncGatewayClient:
    """
    Asynchronous upload gateway client.

    Features:
    - Explicit bearer token on every call (no shared auth state)
    - Separate RPC and retrieval timeouts
    - HEAD and Range requests for reading archive tails
    - No retries: every failure, timeouts included, surfaces as GatewayError

    Example:
        >>> config = GatewayConfig(endpoint="https://example.com/uploadToS3")
        >>> async with AsyncGatewayClient(config) as gateway:
        ...     started = await gateway.start("export.zip", token="abc")
    """

    def __init__(self, config: Optional[GatewayConfig] = None):
        """
        Initialize async gateway client.

        Args:
            config: Gateway configuration (uses defaults if not provided)
        """
        self._config = config or GatewayConfig.default()
        self._session: Optional[aiohttp.ClientSession] = None
        self._connector: Optional[aiohttp.TCPConnector] = None
        self._closed = False
        self._logger = get_logger('archivepy.api')

    @property
    def config(self) -> GatewayConfig:
        """Get current configuration."""
        return self._config

    async def __aenter__(self) -> 'AsyncGatewayClient':
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._closed:
            raise GatewayError("Client is closed")

        if self._session is None or self._session.closed:
            self._connector = aiohttp.TCPConnector(
                **self._config.get_connector_kwargs()
            )
            self._session = aiohttp.ClientSession(
                connector=self._connector,
                **self._config.get_session_kwargs()
            )
        return self._session

    async def close(self):
        """Close client and release resources."""
        self._closed = True

        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

        if self._connector and not self._connector.closed:
            await self._connector.close()
            self._connector = None

    @staticmethod
    def _auth_headers(token: Optional[str]) -> Dict[str, str]:
        if not token:
            return {}
        return {'Authorization': f'Bearer {token}'}

    def _network_error(self, what: str, error: Exception) -> GatewayError:
        # aiohttp raises asyncio.TimeoutError (not a ClientError) when a
        # ClientTimeout total is exceeded
        if isinstance(error, asyncio.TimeoutError):
            message = f"Timed out during {what}"
        else:
            message = f"Network error during {what}: {error}"
        self._logger.error(message)
        return GatewayError(message)

    # =========================================================================
    # Upload gateway RPC
    # =========================================================================

    async def start(self, file_name: str, *, token: Optional[str] = None) -> Dict[str, Any]:
        """
        Open a multipart upload.

        Returns:
            Dict with 'uploadId' and 'fileKey'
        """
        result = await self.call({'action': 'start', 'fileName': file_name}, token=token)
        self._require(result, 'start', 'uploadId', 'fileKey')
        return result

    async def upload_part(
        self,
        upload_id: str,
        file_key: str,
        part_number: int,
        payload: str,
        *,
        token: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Send one base64-encoded part.

        Returns:
            Dict with 'PartNumber' and 'ETag' (the ack token)
        """
        result = await self.call({
            'action': 'upload',
            'uploadId': upload_id,
            'fileKey': file_key,
            'partNumber': part_number,
            'chunkBase64': payload,
        }, token=token)
        self._require(result, 'upload', 'ETag')
        return result

    async def complete(
        self,
        upload_id: str,
        file_key: str,
        parts: List[Dict[str, Any]],
        *,
        token: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Assemble the uploaded parts into the final object.

        Args:
            parts: Ordered [{'PartNumber': n, 'ETag': tag}, ...]

        Returns:
            Dict with 'fileUrl'
        """
        result = await self.call({
            'action': 'complete',
            'uploadId': upload_id,
            'fileKey': file_key,
            'parts': parts,
        }, token=token)
        self._require(result, 'complete', 'fileUrl')
        return result

    async def call(self, data: Dict[str, Any], *, token: Optional[str] = None) -> Any:
        """
        POST one RPC request to the gateway endpoint.

        Raises:
            GatewayError: On network errors, timeouts, non-2xx replies or invalid JSON
        """
        session = await self._ensure_session()
        action = data.get('action')
        self._logger.debug(f"Gateway request '{action}' to {self._config.endpoint}")

        try:
            async with session.post(
                self._config.endpoint,
                json=data,
                headers=self._auth_headers(token),
                proxy=self._config.proxy
            ) as response:
                response_text = await response.text()
                self._logger.debug(
                    f"Gateway response {response.status}: "
                    f"{response_text[:300] if len(response_text) > 300 else response_text}"
                )
                return self._parse_response(response.status, response_text, action)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._network_error(f"'{action}'", e) from e

    def _parse_response(self, status: int, text: str, action: Optional[str]) -> Any:
        """Decode a gateway reply, turning error payloads into GatewayError."""
        try:
            body = json.loads(text) if text else {}
        except json.JSONDecodeError:
            body = None

        if status >= 400:
            message = body.get('error') if isinstance(body, dict) else None
            raise GatewayError(
                message or f"Gateway returned HTTP {status} for '{action}'",
                status=status
            )

        if body is None:
            raise GatewayError(f"Invalid JSON from gateway for '{action}'", status=status)

        if isinstance(body, dict) and 'error' in body:
            raise GatewayError(str(body['error']), status=status)

        return body

    @staticmethod
    def _require(result: Any, action: str, *keys: str) -> None:
        if not isinstance(result, dict):
            raise GatewayError(f"Unexpected '{action}' reply: {result!r}")
        missing = [key for key in keys if not result.get(key)]
        if missing:
            raise GatewayError(f"'{action}' reply missing {', '.join(missing)}")

    # =========================================================================
    # Object retrieval
    # =========================================================================

    async def content_length(self, url: str, *, token: Optional[str] = None) -> Optional[int]:
        """
        Size of a stored object from a HEAD request.

        Returns:
            Size in bytes, or None if the server reports no usable length
        """
        session = await self._ensure_session()

        try:
            async with session.head(
                url,
                headers=self._auth_headers(token),
                proxy=self._config.proxy,
                allow_redirects=True
            ) as response:
                if response.status >= 400:
                    raise GatewayError(
                        f"Failed to stat: {response.status} {response.reason}",
                        status=response.status
                    )
                length = response.headers.get('Content-Length')
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._network_error(f"HEAD {url}", e) from e

        try:
            size = int(length) if length else 0
        except ValueError:
            size = 0
        self._logger.debug(f"{url} is {size} bytes")
        return size if size > 0 else None

    async def fetch_range(
        self,
        url: str,
        start: int,
        end: int,
        *,
        token: Optional[str] = None
    ) -> Optional[bytes]:
        """
        Download bytes [start, end] (inclusive) of a stored object.

        Returns:
            The requested bytes, or None if the server ignored the Range
            header and answered with the whole object (HTTP 200). The body
            of such a reply is not read.

        Raises:
            GatewayError: On network errors, timeouts or error statuses
        """
        session = await self._ensure_session()
        headers = {**self._auth_headers(token), 'Range': f'bytes={start}-{end}'}

        try:
            async with session.get(url, headers=headers, proxy=self._config.proxy) as response:
                if response.status == 200:
                    self._logger.debug(f"Range requests not supported by {url}")
                    return None
                if response.status != 206:
                    raise GatewayError(
                        f"Range request failed: {response.status} {response.reason}",
                        status=response.status
                    )
                data = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._network_error(f"range fetch of {url}", e) from e

        self._logger.debug(f"Fetched bytes {start}-{end} of {url}")
        return data

    async def fetch(self, url: str, *, token: Optional[str] = None) -> bytes:
        """
        Download a whole stored object.

        Raises:
            GatewayError: On network errors, timeouts or non-2xx replies
        """
        session = await self._ensure_session()
        self._logger.debug(f"Fetching {url}")

        try:
            async with session.get(
                url,
                headers=self._auth_headers(token),
                proxy=self._config.proxy,
                timeout=self._config.timeout.for_retrieval()
            ) as response:
                if response.status >= 400:
                    raise GatewayError(
                        f"Failed to fetch: {response.status} {response.reason}",
                        status=response.status
                    )
                data = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._network_error(f"fetch of {url}", e) from e

        self._logger.debug(f"Fetched {len(data)} bytes from {url}")
        return data

    async def fetch_json(self, url: str, *, token: Optional[str] = None) -> Any:
        """Download and decode a JSON document (e.g. an archive manifest)."""
        data = await self.fetch(url, token=token)
        try:
            return json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise GatewayError(f"Invalid JSON at {url}: {e}") from e
