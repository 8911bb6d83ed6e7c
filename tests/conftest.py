"""Pytest fixtures for archivepy tests."""
import io
import json
import os
import zipfile
from unittest.mock import Mock, AsyncMock

import pytest

from archivepy.core.exceptions import GatewayError

MIB = 1024 * 1024


def make_gateway(fail_part=None, fail_start=False, fail_complete=False):
    """
    Build a mock upload gateway.

    upload_part acknowledges every part with 'etag-<n>' unless it is
    fail_part, which raises GatewayError.
    """
    gateway = Mock()

    async def upload_part(upload_id, file_key, part_number, payload, *, token=None):
        if part_number == fail_part:
            raise GatewayError(f"part {part_number} rejected", status=500)
        return {'PartNumber': part_number, 'ETag': f'etag-{part_number}'}

    if fail_start:
        gateway.start = AsyncMock(side_effect=GatewayError("Unauthorized", status=401))
    else:
        gateway.start = AsyncMock(return_value={
            'uploadId': 'upload-123',
            'fileKey': 'user-1/1700000000_export.zip'
        })

    gateway.upload_part = AsyncMock(side_effect=upload_part)

    if fail_complete:
        gateway.complete = AsyncMock(side_effect=GatewayError("NoSuchUpload", status=404))
    else:
        gateway.complete = AsyncMock(return_value={
            'success': True,
            'fileUrl': 'https://objects.example.com/bucket/user-1/1700000000_export.zip',
            'fileKey': 'user-1/1700000000_export.zip'
        })

    return gateway


def make_object_store(objects, supports_range=True, reports_length=True):
    """
    Build a mock object store serving objects (url -> bytes).

    Every retrieval method is an AsyncMock backed by the dict, so tests can
    both read real bytes and assert on the calls made. With
    supports_range=False, fetch_range answers like a server that ignores
    the Range header.
    """
    store = Mock()

    def lookup(url):
        if url not in objects:
            raise GatewayError("Failed to fetch: 404 Not Found", status=404)
        return objects[url]

    async def content_length(url, *, token=None):
        data = lookup(url)
        return len(data) if reports_length and data else None

    async def fetch_range(url, start, end, *, token=None):
        data = lookup(url)
        return data[start:end + 1] if supports_range else None

    async def fetch(url, *, token=None):
        return lookup(url)

    async def fetch_json(url, *, token=None):
        return json.loads(lookup(url))

    store.content_length = AsyncMock(side_effect=content_length)
    store.fetch_range = AsyncMock(side_effect=fetch_range)
    store.fetch = AsyncMock(side_effect=fetch)
    store.fetch_json = AsyncMock(side_effect=fetch_json)
    return store


    return gateway


@pytest.fixture
def gateway():
    """Mock gateway that accepts everything."""
    return make_gateway()


@pytest.fixture
def gateway_factory():
    """Factory for mock gateways with injected failures."""
    return make_gateway


@pytest.fixture
def random_payload():
    """Non-text binary payload of 1 MiB + 123 bytes."""
    return os.urandom(MIB + 123)


@pytest.fixture
def sample_paths():
    """Flat entry paths of a small export."""
    return [
        "messages/inbox/alice/message_1.json",
        "messages/inbox/bob/message_1.json",
        "messages/inbox/bob/photos/1.jpg",
        "posts/your_posts_1.json",
        "profile_information/profile_information.json",
        "index.html",
    ]


@pytest.fixture
def zip_bytes(sample_paths):
    """In-memory zip archive with the sample paths plus an explicit directory."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w') as zf:
        zf.writestr("empty_dir/", b"")
        for path in sample_paths:
            zf.writestr(path, b"{}")
    return buffer.getvalue()


@pytest.fixture
def object_store_factory():
    """Factory for mock object stores."""
    return make_object_store
