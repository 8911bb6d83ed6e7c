"""
Archive inspector.

Fetches an uploaded archive's central directory (or its prepared
manifest) and builds the directory tree of its entries without
extracting anything.
"""
from typing import Any, List, Optional, Protocol

from .models import ArchiveEntry
from .path_trie import PathTrie
from .readers import ZipEntryReader, ManifestReader, RangeZipReader, RangeFetcherProtocol
from ..exceptions import DecodeError, GatewayError
from ..logging import get_logger

logger = get_logger('archivepy.archive.inspector')


class ObjectFetcherProtocol(RangeFetcherProtocol, Protocol):
    """Protocol for object retrieval."""

    async def fetch(self, url: str, *, token: Optional[str] = None) -> bytes:
        ...

    async def fetch_json(self, url: str, *, token: Optional[str] = None) -> Any:
        ...


class ArchiveInspector:
    """
    Builds a PathTrie for a stored archive.

    A manifest, when given, is tried first because it avoids touching the
    archive; any manifest problem falls back to reading the archive's
    central directory by byte range. Only when the server ignores Range
    requests is the whole archive downloaded. Parsing failures raise a
    single DecodeError and no partial tree is ever returned.
    """

    def __init__(
        self,
        fetcher: ObjectFetcherProtocol,
        zip_reader: Optional[ZipEntryReader] = None,
        manifest_reader: Optional[ManifestReader] = None,
        strict: bool = False,
        range_reader: Optional[RangeZipReader] = None
    ):
        """
        Initialize inspector.

        Args:
            fetcher: Object retrieval client (content_length / fetch_range / fetch / fetch_json)
            zip_reader: Container reader for fully downloaded archive bytes
            manifest_reader: Reader for prepared JSON manifests
            strict: Raise on File/Directory conflicts instead of last-wins
            range_reader: Central directory reader over Range requests
        """
        self._fetcher = fetcher
        self._zip_reader = zip_reader or ZipEntryReader()
        self._manifest_reader = manifest_reader or ManifestReader()
        self._range_reader = range_reader or RangeZipReader(fetcher)
        self._strict = strict

    async def inspect(
        self,
        file_url: str,
        manifest_url: Optional[str] = None,
        *,
        token: Optional[str] = None
    ) -> PathTrie:
        """
        Build the directory tree of an archive.

        Args:
            file_url: Locator returned by a completed upload
            manifest_url: Optional prepared manifest of the archive entries
            token: Optional bearer token for retrieval

        Returns:
            PathTrie of the archive entries

        Raises:
            GatewayError: If the archive cannot be fetched
            DecodeError: If the archive is unreadable, ZIP64, has an
                oversized central directory or has no entries
            TreeConflictError: On conflicting entries in strict mode
        """
        entries: List[ArchiveEntry] = []

        if manifest_url:
            entries = await self._entries_from_manifest(manifest_url, token)

        if not entries:
            entries = await self._entries_from_archive(file_url, token)

        if not entries:
            raise DecodeError(f"No entries found in {file_url}")

        trie = PathTrie.build(entries, strict=self._strict)
        logger.info(
            f"Tree built: {trie.entry_count} entries, "
            f"{len(trie.conflicts)} conflicts"
        )
        return trie

    async def _entries_from_manifest(self, manifest_url: str, token: Optional[str]) -> List[ArchiveEntry]:
        logger.info(f"Loading entries from manifest {manifest_url}")
        try:
            manifest = await self._fetcher.fetch_json(manifest_url, token=token)
            entries = self._manifest_reader.read_entries(manifest)
        except (GatewayError, DecodeError) as e:
            logger.warning(f"Manifest load failed, falling back to archive: {e}")
            return []

        logger.info(f"Loaded {len(entries)} paths from manifest")
        return entries

    async def _entries_from_archive(self, file_url: str, token: Optional[str]) -> List[ArchiveEntry]:
        logger.info(f"Reading central directory of {file_url}")
        entries = await self._range_reader.read_entries(file_url, token=token)
        if entries is not None:
            return entries

        logger.warning(f"Range requests unavailable for {file_url}, downloading whole archive")
        data = await self._fetcher.fetch(file_url, token=token)
        return self._zip_reader.read_entries(data)
