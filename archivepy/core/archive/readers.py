"""
Container readers.

Turn fetched bytes into the flat entry listing the trie is built from.
RangeZipReader reads only the tail and central directory of a stored zip
archive through HTTP Range requests; ZipEntryReader parses a fully
downloaded archive when the server does not honour ranges.
"""
import io
import struct
import zipfile
from typing import Any, List, Optional, Protocol, Tuple

from .models import ArchiveEntry
from ..exceptions import DecodeError
from ..logging import get_logger

EOCD_SIGNATURE = 0x06054b50
CENTRAL_HEADER_SIGNATURE = 0x02014b50
EOCD_SIZE = 22
CENTRAL_HEADER_SIZE = 46

# EOCD record plus the longest possible archive comment
MAX_TAIL_SCAN = 65536 + EOCD_SIZE
MAX_CD_SIZE = 50 * 1024 * 1024

_EOCD = struct.Struct('<IHHHHIIH')
_CENTRAL_HEADER = struct.Struct('<IHHHHHHIIIHHHHHII')
_EOCD_MAGIC = struct.pack('<I', EOCD_SIGNATURE)
_ZIP64_LOCATOR_MAGIC = b'PK\x06\x07'
_ZIP64_LOCATOR_SIZE = 20
_UTF8_FLAG = 0x800


def find_end_of_directory(tail: bytes) -> Tuple[int, int, int]:
    """
    Locate the end-of-central-directory record in the tail of an archive.

    Args:
        tail: Last bytes of the archive (up to MAX_TAIL_SCAN)

    Returns:
        (entry_count, directory_size, directory_offset)

    Raises:
        DecodeError: If no record is found or the archive is ZIP64
    """
    # The record needs EOCD_SIZE bytes after its signature
    pos = tail.rfind(_EOCD_MAGIC, 0, len(tail) - EOCD_SIZE + len(_EOCD_MAGIC))
    if pos < 0:
        raise DecodeError("End of central directory not found")

    (_, _, _, _, entry_count,
     directory_size, directory_offset, _) = _EOCD.unpack_from(tail, pos)

    locator_at = pos - _ZIP64_LOCATOR_SIZE
    has_zip64_locator = locator_at >= 0 and tail[locator_at:locator_at + 4] == _ZIP64_LOCATOR_MAGIC
    if (entry_count == 0xFFFF or directory_size == 0xFFFFFFFF
            or directory_offset == 0xFFFFFFFF or has_zip64_locator):
        raise DecodeError("ZIP64 archives not supported")

    return entry_count, directory_size, directory_offset


def parse_central_directory(data: bytes, entry_count: int) -> List[ArchiveEntry]:
    """
    Parse entry_count central directory file headers.

    Raises:
        DecodeError: On a bad header signature or truncated data
    """
    entries = []
    offset = 0
    for index in range(entry_count):
        if offset + CENTRAL_HEADER_SIZE > len(data):
            raise DecodeError(f"Central directory truncated at entry {index}")

        header = _CENTRAL_HEADER.unpack_from(data, offset)
        if header[0] != CENTRAL_HEADER_SIGNATURE:
            raise DecodeError(f"Bad central directory signature at offset {offset}")

        flags = header[3]
        uncompressed_size = header[9]
        name_length, extra_length, comment_length = header[10], header[11], header[12]

        start = offset + CENTRAL_HEADER_SIZE
        raw_name = data[start:start + name_length]
        if len(raw_name) < name_length:
            raise DecodeError(f"Central directory truncated at entry {index}")

        name = raw_name.decode('utf-8' if flags & _UTF8_FLAG else 'cp437', errors='replace')
        entries.append(ArchiveEntry(
            path=name,
            is_directory=name.endswith('/'),
            size=uncompressed_size
        ))
        offset = start + name_length + extra_length + comment_length

    return entries


class RangeFetcherProtocol(Protocol):
    """Protocol for ranged object retrieval."""

    async def content_length(self, url: str, *, token: Optional[str] = None) -> Optional[int]:
        ...

    async def fetch_range(
        self,
        url: str,
        start: int,
        end: int,
        *,
        token: Optional[str] = None
    ) -> Optional[bytes]:
        ...


class RangeZipReader:
    """
    Lists a stored zip archive from its central directory alone.

    Needs a HEAD request for the archive size and two Range requests at
    most: one for the tail holding the end-of-central-directory record,
    one for the directory itself when the tail does not already cover it.
    """

    def __init__(self, fetcher: RangeFetcherProtocol, max_directory_size: int = MAX_CD_SIZE):
        self._fetcher = fetcher
        self._max_directory_size = max_directory_size
        self._logger = get_logger('archivepy.archive.zip')

    async def read_entries(self, url: str, *, token: Optional[str] = None) -> Optional[List[ArchiveEntry]]:
        """
        List the entries of a stored zip archive.

        Returns:
            The entries, or None if the size is unknown or the server does
            not support Range requests (the caller downloads the archive)

        Raises:
            GatewayError: If a request fails
            DecodeError: If the archive is not a readable zip archive
        """
        size = await self._fetcher.content_length(url, token=token)
        if size is None:
            self._logger.debug(f"No usable Content-Length for {url}")
            return None
        if size < EOCD_SIZE:
            raise DecodeError(f"Too small to be a zip archive: {size} bytes")

        tail_start = max(0, size - MAX_TAIL_SCAN)
        tail = await self._fetcher.fetch_range(url, tail_start, size - 1, token=token)
        if tail is None:
            return None

        entry_count, directory_size, directory_offset = find_end_of_directory(tail)
        self._logger.debug(
            f"Central directory: {entry_count} entries, "
            f"{directory_size} bytes at offset {directory_offset}"
        )

        if directory_size > self._max_directory_size:
            raise DecodeError(
                f"Central directory too large: {directory_size} bytes "
                f"(limit {self._max_directory_size})"
            )
        if directory_offset + directory_size > size:
            raise DecodeError("Central directory lies outside the archive")
        if entry_count == 0:
            return []

        if directory_offset >= tail_start:
            begin = directory_offset - tail_start
            directory = tail[begin:begin + directory_size]
        else:
            directory = await self._fetcher.fetch_range(
                url, directory_offset, directory_offset + directory_size - 1, token=token
            )
            if directory is None:
                return None

        entries = parse_central_directory(directory, entry_count)
        self._logger.debug(f"Parsed {len(entries)} entries from central directory")
        return entries


class ZipEntryReader:
    """
    Reads a zip central directory.

    Entry contents are never decompressed; only names, directory flags and
    sizes are taken from the listing.
    """

    def __init__(self):
        self._logger = get_logger('archivepy.archive.zip')

    def read_entries(self, data: bytes) -> List[ArchiveEntry]:
        """
        List the entries of a zip archive.

        Raises:
            DecodeError: If the data is not a readable zip archive
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data), 'r') as zf:
                entries = [
                    ArchiveEntry(
                        path=info.filename,
                        is_directory=info.is_dir(),
                        size=info.file_size
                    )
                    for info in zf.infolist()
                ]
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as e:
            raise DecodeError(f"Unreadable zip archive: {e}") from e

        self._logger.debug(f"Parsed {len(entries)} entries from central directory")
        return entries


class ManifestReader:
    """
    Reads a prepared archive manifest.

    Format: {"entries": [{"entryPath": "a/b.txt", "isDirectory": false}, ...]}
    """

    def read_entries(self, manifest: Any) -> List[ArchiveEntry]:
        """
        List the entries of a decoded manifest document.

        Raises:
            DecodeError: If the manifest has no usable entry list
        """
        if not isinstance(manifest, dict) or not isinstance(manifest.get('entries'), list):
            raise DecodeError("Manifest has no 'entries' list")

        entries = []
        for item in manifest['entries']:
            if not isinstance(item, dict) or not isinstance(item.get('entryPath'), str):
                raise DecodeError(f"Invalid manifest entry: {item!r}")
            is_directory = item.get('isDirectory')
            try:
                size = int(item.get('size') or 0)
            except (TypeError, ValueError) as e:
                raise DecodeError(f"Invalid size for {item['entryPath']}: {e}") from e
            entries.append(ArchiveEntry(
                path=item['entryPath'],
                is_directory=bool(is_directory) if is_directory is not None else None,
                size=size
            ))
        return entries
