"""Tests for upload services."""
import base64
import os
import tempfile
from pathlib import Path
from unittest.mock import Mock, AsyncMock

import pytest

from archivepy.core.upload.services import (
    FileValidator,
    AsyncFileReader,
    FileSource,
    BytesSource,
    PartUploader
)
from archivepy.core.upload.models import ChunkInfo, PartResult
from archivepy.core.exceptions import GatewayError


@pytest.fixture
def temp_file():
    """Create temporary file with known content."""
    fd, path = tempfile.mkstemp()
    os.write(fd, b"0123456789ABCDEFGHIJ")  # 20 bytes
    os.close(fd)
    yield Path(path)
    os.unlink(path)


class TestFileValidator:
    """Test suite for FileValidator."""

    @pytest.fixture
    def validator(self):
        return FileValidator()

    def test_validate_existing_file(self, validator, temp_file):
        """Test validating existing file."""
        path, size = validator.validate(temp_file)

        assert path == temp_file
        assert size == 20

    def test_validate_string_path(self, validator, temp_file):
        """Test validating string path."""
        path, _ = validator.validate(str(temp_file))

        assert path == temp_file

    def test_validate_nonexistent_file(self, validator):
        """Test validating non-existent file."""
        with pytest.raises(FileNotFoundError):
            validator.validate(Path("/nonexistent/file.zip"))

    def test_validate_directory(self, validator):
        """Test validating directory raises error."""
        with pytest.raises(ValueError):
            validator.validate(Path(tempfile.gettempdir()))


class TestAsyncFileReader:
    """Test suite for AsyncFileReader."""

    @pytest.fixture
    def reader(self):
        return AsyncFileReader()

    @pytest.mark.asyncio
    async def test_read_chunk(self, reader, temp_file):
        """Test reading a chunk."""
        assert await reader.read_chunk(temp_file, 0, 10) == b"0123456789"

    @pytest.mark.asyncio
    async def test_read_chunk_with_open_handle(self, reader, temp_file):
        """Test reads reuse the open handle."""
        await reader.open_file(temp_file)
        try:
            assert await reader.read_chunk(temp_file, 5, 15) == b"56789ABCDE"
            assert await reader.read_chunk(temp_file, 15, 20) == b"FGHIJ"
        finally:
            await reader.close_file()

    @pytest.mark.asyncio
    async def test_read_empty_range(self, reader, temp_file):
        """Test an empty range reads as empty bytes, not failure."""
        assert await reader.read_chunk(temp_file, 0, 0) == b""

    @pytest.mark.asyncio
    async def test_read_nonexistent_file(self, reader):
        """Test reading non-existent file returns None."""
        result = await reader.read_chunk(Path("/nonexistent/file.zip"), 0, 100)

        assert result is None


class TestSources:
    """Test suite for upload sources."""

    @pytest.mark.asyncio
    async def test_file_source(self, temp_file):
        """Test file-backed source."""
        source = FileSource(temp_file)
        await source.open()
        try:
            assert source.size == 20
            assert source.name == temp_file.name
            assert await source.read(10, 20) == b"ABCDEFGHIJ"
        finally:
            await source.close()

    def test_file_source_custom_name(self, temp_file):
        assert FileSource(temp_file, name="export.zip").name == "export.zip"

    def test_file_source_missing(self):
        with pytest.raises(FileNotFoundError):
            FileSource("/nonexistent/export.zip")

    @pytest.mark.asyncio
    async def test_bytes_source(self):
        """Test in-memory source."""
        source = BytesSource(b"abcdef", "mem.zip")

        assert source.size == 6
        assert await source.read(2, 5) == b"cde"
        assert await source.read(0, 0) == b""


class TestPartUploader:
    """Test suite for PartUploader."""

    @pytest.fixture
    def gateway(self):
        gateway = Mock()
        gateway.upload_part = AsyncMock(return_value={'PartNumber': 2, 'ETag': '"etag-2"'})
        return gateway

    @pytest.mark.asyncio
    async def test_upload_part_encodes_payload(self, gateway):
        """Test the part is base64-encoded and sent with its number and token."""
        uploader = PartUploader(gateway, 'upload-1', 'user/key.zip', token='tok')
        data = b"\x00\xffbinary"

        result = await uploader.upload_part(ChunkInfo(index=1, start=100, end=108), data)

        assert result == PartResult(part_number=2, ack_token='"etag-2"', size=8)
        gateway.upload_part.assert_awaited_once_with(
            'upload-1', 'user/key.zip', 2, base64.b64encode(data).decode(), token='tok'
        )

    @pytest.mark.asyncio
    async def test_mismatched_ack_raises(self, gateway):
        """Test an ack for a different part number is rejected."""
        uploader = PartUploader(gateway, 'upload-1', 'user/key.zip')

        with pytest.raises(GatewayError, match="acknowledged part 2"):
            await uploader.upload_part(ChunkInfo(index=0, start=0, end=4), b"data")

    @pytest.mark.asyncio
    async def test_gateway_error_propagates(self, gateway):
        """Test gateway failures are not swallowed."""
        gateway.upload_part.side_effect = GatewayError("boom", status=500)
        uploader = PartUploader(gateway, 'upload-1', 'user/key.zip')

        with pytest.raises(GatewayError):
            await uploader.upload_part(ChunkInfo(index=1, start=0, end=4), b"data")
