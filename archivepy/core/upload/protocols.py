"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection and strategy pattern.
"""
from typing import Protocol, Dict, Any, List, Iterator, Optional
from pathlib import Path

from .models import ChunkInfo


class ChunkingStrategy(Protocol):
    """
    Protocol for file chunking strategies.

    Allows different chunking algorithms to be plugged in.
    """

    def plan(self, total_size: int) -> Iterator[ChunkInfo]:
        """
        Lazily yield chunk boundaries for a payload.

        Args:
            total_size: Total payload size in bytes

        Returns:
            Iterator of ChunkInfo in ascending order
        """
        ...

    def count(self, total_size: int) -> int:
        """Number of chunks plan() yields for total_size."""
        ...


class PartEncoderProtocol(Protocol):
    """Protocol for transport encoders."""

    def encode(self, data: bytes) -> str:
        """Encode raw bytes into transport-safe text."""
        ...

    def decode(self, text: str) -> bytes:
        """Reverse encode()."""
        ...


class FileReaderProtocol(Protocol):
    """Protocol for file reading operations."""

    async def open_file(self, file_path: Path) -> None:
        """Keep file_path open for the following reads."""
        ...

    async def close_file(self) -> None:
        ...

    async def read_chunk(
        self,
        file_path: Path,
        start: int,
        end: int
    ) -> Optional[bytes]:
        """
        Read a chunk from a file.

        Args:
            file_path: Path to the file
            start: Start position in bytes
            end: End position in bytes

        Returns:
            Chunk data or None if reading failed
        """
        ...


class UploadGatewayProtocol(Protocol):
    """
    Protocol for the multipart upload gateway.

    Every call carries its credential explicitly.
    """

    async def start(self, file_name: str, *, token: Optional[str] = None) -> Dict[str, Any]:
        """Returns {'uploadId': ..., 'fileKey': ...}."""
        ...

    async def upload_part(
        self,
        upload_id: str,
        file_key: str,
        part_number: int,
        payload: str,
        *,
        token: Optional[str] = None
    ) -> Dict[str, Any]:
        """Returns {'PartNumber': n, 'ETag': ack_token}."""
        ...

    async def complete(
        self,
        upload_id: str,
        file_key: str,
        parts: List[Dict[str, Any]],
        *,
        token: Optional[str] = None
    ) -> Dict[str, Any]:
        """Returns {'fileUrl': ...}."""
        ...
