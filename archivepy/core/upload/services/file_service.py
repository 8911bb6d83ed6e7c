"""
File validation and reading services.

Single Responsibility: Each class handles one specific task.
"""
from pathlib import Path
from typing import Tuple, Optional, Union
import aiofiles

from ..protocols import FileReaderProtocol
from ...logging import get_logger


class FileValidator:
    """
    Validates files before upload.

    Responsibilities:
    - Check file existence
    - Verify file is not a directory
    - Get file size
    """

    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Validate a file for upload.

        Args:
            file_path: Path to the file

        Returns:
            Tuple of (validated Path, file size in bytes)

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a regular file
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        if not path.is_file():
            raise ValueError(f"Path is not a file: {path}")

        return path, path.stat().st_size


class AsyncFileReader:
    """
    Asynchronous file reader for chunk-based reading.

    Uses aiofiles for non-blocking I/O. Keeps the file handle open for the
    whole upload to avoid repeated open/close operations.
    """

    def __init__(self):
        """Initialize file reader."""
        self._logger = get_logger('archivepy.upload.file')
        self._file_handle = None
        self._current_file_path: Optional[Path] = None

    async def open_file(self, file_path: Path) -> None:
        """
        Open file for reading. Call this before reading chunks.

        Args:
            file_path: Path to the file to open
        """
        if self._file_handle is not None and self._current_file_path == file_path:
            return

        if self._file_handle is not None:
            await self.close_file()

        self._file_handle = await aiofiles.open(file_path, 'rb')
        self._current_file_path = file_path

    async def close_file(self) -> None:
        """Close the currently open file."""
        if self._file_handle is not None:
            await self._file_handle.close()
            self._file_handle = None
            self._current_file_path = None

    async def read_chunk(
        self,
        file_path: Path,
        start: int,
        end: int
    ) -> Optional[bytes]:
        """
        Read a chunk from a file.

        Reuses the open handle when there is one, otherwise opens and
        closes the file around the read.

        Args:
            file_path: Path to the file
            start: Start position in bytes
            end: End position in bytes

        Returns:
            Chunk data (b'' for an empty range) or None if reading failed
        """
        chunk_size = end - start
        if chunk_size == 0:
            return b''

        try:
            if self._file_handle is not None and self._current_file_path == file_path:
                await self._file_handle.seek(start)
                data = await self._file_handle.read(chunk_size)
            else:
                async with aiofiles.open(file_path, 'rb') as f:
                    await f.seek(start)
                    data = await f.read(chunk_size)

            if data:
                self._logger.debug(f"Read chunk: {start}-{end} ({len(data)} bytes)")
            return data if data else None
        except (IOError, OSError) as e:
            self._logger.error(f"Failed to read chunk {start}-{end}: {e}")
            return None


class FileSource:
    """Upload source backed by a file on disk, read one chunk at a time."""

    def __init__(self, path: Union[str, Path], name: Optional[str] = None,
                 reader: Optional[FileReaderProtocol] = None):
        self.path, self.size = FileValidator().validate(path)
        self.name = name or self.path.name
        self._reader = reader or AsyncFileReader()

    async def open(self) -> None:
        await self._reader.open_file(self.path)

    async def close(self) -> None:
        await self._reader.close_file()

    async def read(self, start: int, end: int) -> Optional[bytes]:
        return await self._reader.read_chunk(self.path, start, end)


class BytesSource:
    """Upload source backed by an in-memory payload."""

    def __init__(self, data: bytes, name: str):
        self._view = memoryview(data)
        self.size = len(data)
        self.name = name

    async def open(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def read(self, start: int, end: int) -> Optional[bytes]:
        return bytes(self._view[start:end])
