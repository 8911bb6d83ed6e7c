"""Tests for the gateway HTTP client and its configuration."""
import asyncio
from unittest.mock import Mock, AsyncMock

import aiohttp
import pytest

from archivepy.core.api import (
    AsyncGatewayClient,
    GatewayConfig,
    TimeoutConfig,
    DEFAULT_ENDPOINT
)
from archivepy.core.exceptions import GatewayError


class FakeResponse:
    """Minimal stand-in for an aiohttp response context manager."""

    def __init__(self, status=200, text='', body=b'', reason='OK', headers=None):
        self.status = status
        self.reason = reason
        self.headers = headers or {}
        self._text = text
        self._body = body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def text(self):
        return self._text

    async def read(self):
        return self._body


def make_client(response=None, error=None):
    """Client whose session returns response (or raises error) for every request."""
    client = AsyncGatewayClient(GatewayConfig(endpoint='https://gw.example.com/uploadToS3'))
    session = Mock()
    for method in ('post', 'get', 'head'):
        if error is not None:
            setattr(session, method, Mock(side_effect=error))
        else:
            setattr(session, method, Mock(return_value=response))
    client._ensure_session = AsyncMock(return_value=session)
    return client, session


class TestGatewayConfig:
    """Test suite for GatewayConfig."""

    def test_defaults(self):
        config = GatewayConfig.default()

        assert config.endpoint == DEFAULT_ENDPOINT
        assert config.proxy is None
        assert config.verify_ssl
        assert config.timeout.rpc == 300.0
        assert config.timeout.retrieval is None

    def test_session_kwargs(self):
        """Test headers and the RPC timeout are passed to the session."""
        config = GatewayConfig(extra_headers={'X-Trace': '1'}, timeout=TimeoutConfig(rpc=10))
        kwargs = config.get_session_kwargs()

        assert kwargs['headers'] == {'User-Agent': 'archivepy/1.0.0', 'X-Trace': '1'}
        assert isinstance(kwargs['timeout'], aiohttp.ClientTimeout)
        assert kwargs['timeout'].total == 10

    def test_retrieval_timeout_is_unbounded(self):
        """Test whole-object downloads keep connect/read bounds but no total."""
        timeout = TimeoutConfig(connect=5, sock_read=60).for_retrieval()

        assert timeout.total is None
        assert timeout.connect == 5
        assert timeout.sock_read == 60

    def test_connector_kwargs(self):
        kwargs = GatewayConfig.insecure(limit_per_host=5).get_connector_kwargs()

        assert kwargs['limit_per_host'] == 5
        assert kwargs['ssl'] is False

    def test_ssl_context(self):
        context = GatewayConfig().ssl_context()

        assert context.check_hostname


class TestTimeouts:
    """Test suite for timeout handling."""

    @pytest.mark.asyncio
    async def test_rpc_timeout_becomes_gateway_error(self):
        """Test an exceeded total timeout surfaces as GatewayError, not TimeoutError."""
        client, _ = make_client(error=asyncio.TimeoutError())

        with pytest.raises(GatewayError, match="Timed out during 'start'"):
            await client.start("f.zip")

    @pytest.mark.asyncio
    async def test_fetch_timeout_becomes_gateway_error(self):
        client, _ = make_client(error=asyncio.TimeoutError())

        with pytest.raises(GatewayError, match="Timed out"):
            await client.fetch_json('https://x/k.json')

    @pytest.mark.asyncio
    async def test_range_timeout_becomes_gateway_error(self):
        client, _ = make_client(error=asyncio.TimeoutError())

        with pytest.raises(GatewayError, match="Timed out"):
            await client.fetch_range('https://x/k.zip', 0, 21)


class TestParseResponse:
    """Test suite for reply decoding."""

    @pytest.fixture
    def client(self):
        return AsyncGatewayClient()

    def test_success(self, client):
        assert client._parse_response(200, '{"uploadId": "u"}', 'start') == {'uploadId': 'u'}

    def test_error_status_uses_body_message(self, client):
        """Test the gateway's error text is surfaced with the status."""
        with pytest.raises(GatewayError, match="Unauthorized") as exc_info:
            client._parse_response(401, '{"error": "Unauthorized"}', 'start')

        assert exc_info.value.status == 401

    def test_error_status_without_body(self, client):
        with pytest.raises(GatewayError, match="HTTP 502 for 'upload'"):
            client._parse_response(502, '<html>Bad Gateway</html>', 'upload')

    def test_invalid_json(self, client):
        with pytest.raises(GatewayError, match="Invalid JSON"):
            client._parse_response(200, 'not json', 'complete')

    def test_error_field_on_success_status(self, client):
        with pytest.raises(GatewayError, match="Invalid action"):
            client._parse_response(200, '{"error": "Invalid action"}', 'oops')

    def test_require(self):
        """Test missing reply fields are reported by name."""
        with pytest.raises(GatewayError, match="'start' reply missing fileKey"):
            AsyncGatewayClient._require({'uploadId': 'u'}, 'start', 'uploadId', 'fileKey')

        with pytest.raises(GatewayError, match="Unexpected"):
            AsyncGatewayClient._require(['u'], 'start', 'uploadId')


class TestGatewayRpc:
    """Test suite for the RPC calls."""

    @pytest.mark.asyncio
    async def test_start_posts_action_and_token(self):
        """Test start() sends the file name with an explicit bearer token."""
        client, session = make_client(FakeResponse(text='{"uploadId": "u-1", "fileKey": "k/f.zip"}'))

        result = await client.start("f.zip", token='tok')

        assert result == {'uploadId': 'u-1', 'fileKey': 'k/f.zip'}
        session.post.assert_called_once_with(
            'https://gw.example.com/uploadToS3',
            json={'action': 'start', 'fileName': 'f.zip'},
            headers={'Authorization': 'Bearer tok'},
            proxy=None
        )

    @pytest.mark.asyncio
    async def test_upload_part_payload(self):
        client, session = make_client(FakeResponse(text='{"ETag": "\\"e1\\"", "PartNumber": 1}'))

        result = await client.upload_part('u-1', 'k/f.zip', 1, 'AAAA', token='tok')

        assert result['ETag'] == '"e1"'
        assert session.post.call_args.kwargs['json'] == {
            'action': 'upload',
            'uploadId': 'u-1',
            'fileKey': 'k/f.zip',
            'partNumber': 1,
            'chunkBase64': 'AAAA',
        }

    @pytest.mark.asyncio
    async def test_complete_sends_ordered_parts(self):
        client, session = make_client(FakeResponse(text='{"success": true, "fileUrl": "https://x/k"}'))
        parts = [{'PartNumber': 1, 'ETag': 'a'}, {'PartNumber': 2, 'ETag': 'b'}]

        result = await client.complete('u-1', 'k', parts)

        assert result['fileUrl'] == 'https://x/k'
        assert session.post.call_args.kwargs['json']['parts'] == parts
        assert session.post.call_args.kwargs['headers'] == {}

    @pytest.mark.asyncio
    async def test_complete_without_url(self):
        client, _ = make_client(FakeResponse(text='{"success": true}'))

        with pytest.raises(GatewayError, match="fileUrl"):
            await client.complete('u-1', 'k', [])

    @pytest.mark.asyncio
    async def test_network_error(self):
        """Test aiohttp errors become GatewayError."""
        client, _ = make_client(error=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(GatewayError, match="Network error"):
            await client.start("f.zip")

    @pytest.mark.asyncio
    async def test_closed_client(self):
        client = AsyncGatewayClient()
        await client.close()

        with pytest.raises(GatewayError, match="closed"):
            await client.call({'action': 'start'})


class TestObjectRetrieval:
    """Test suite for fetch / fetch_json."""

    @pytest.mark.asyncio
    async def test_fetch(self):
        client, session = make_client(FakeResponse(body=b'PK\x05\x06'))

        assert await client.fetch('https://x/k.zip', token='tok') == b'PK\x05\x06'
        assert session.get.call_args.kwargs['headers'] == {'Authorization': 'Bearer tok'}

    @pytest.mark.asyncio
    async def test_fetch_error_status(self):
        client, _ = make_client(FakeResponse(status=404, reason='Not Found'))

        with pytest.raises(GatewayError, match="404 Not Found") as exc_info:
            await client.fetch('https://x/missing.zip')

        assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_fetch_json(self):
        client, _ = make_client(FakeResponse(body=b'{"entries": []}'))

        assert await client.fetch_json('https://x/k.json') == {'entries': []}

    @pytest.mark.asyncio
    async def test_fetch_json_invalid(self):
        client, _ = make_client(FakeResponse(body=b'<html>not json</html>'))

        with pytest.raises(GatewayError, match="Invalid JSON"):
            await client.fetch_json('https://x/k.json')

    @pytest.mark.asyncio
    async def test_fetch_uses_retrieval_timeout(self):
        """Test whole-object downloads override the session's RPC timeout."""
        client, session = make_client(FakeResponse(body=b'data'))

        await client.fetch('https://x/k.zip')

        assert session.get.call_args.kwargs['timeout'].total is None


class TestRangedRetrieval:
    """Test suite for content_length / fetch_range."""

    @pytest.mark.asyncio
    async def test_content_length(self):
        client, session = make_client(FakeResponse(headers={'Content-Length': '70000'}))

        assert await client.content_length('https://x/k.zip', token='tok') == 70000
        assert session.head.call_args.kwargs['headers'] == {'Authorization': 'Bearer tok'}

    @pytest.mark.asyncio
    async def test_content_length_missing(self):
        """Test a missing or zero length is reported as unknown."""
        client, _ = make_client(FakeResponse(headers={}))
        assert await client.content_length('https://x/k.zip') is None

        client, _ = make_client(FakeResponse(headers={'Content-Length': '0'}))
        assert await client.content_length('https://x/k.zip') is None

    @pytest.mark.asyncio
    async def test_content_length_error_status(self):
        client, _ = make_client(FakeResponse(status=403, reason='Forbidden'))

        with pytest.raises(GatewayError, match="403 Forbidden"):
            await client.content_length('https://x/k.zip')

    @pytest.mark.asyncio
    async def test_fetch_range(self):
        """Test the Range header is inclusive and partial content is returned."""
        client, session = make_client(FakeResponse(status=206, body=b'PK\x05\x06'))

        assert await client.fetch_range('https://x/k.zip', 100, 121, token='tok') == b'PK\x05\x06'
        assert session.get.call_args.kwargs['headers'] == {
            'Authorization': 'Bearer tok',
            'Range': 'bytes=100-121',
        }

    @pytest.mark.asyncio
    async def test_fetch_range_ignored(self):
        """Test a full 200 reply means ranges are unsupported."""
        client, _ = make_client(FakeResponse(status=200, body=b'whole object'))

        assert await client.fetch_range('https://x/k.zip', 0, 21) is None

    @pytest.mark.asyncio
    async def test_fetch_range_error_status(self):
        client, _ = make_client(FakeResponse(status=416, reason='Range Not Satisfiable'))

        with pytest.raises(GatewayError, match="416") as exc_info:
            await client.fetch_range('https://x/k.zip', 0, 21)

        assert exc_info.value.status == 416
