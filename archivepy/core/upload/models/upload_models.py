"""
Data models for upload module.

Uses dataclasses for type-safe data structures.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Any, Optional, List, Union

from ...exceptions import ConfigurationError

DEFAULT_CHUNK_SIZE = 5 * 1024 * 1024  # 5 MiB
MAX_PART_SIZE = 5 * 1024 * 1024 * 1024  # 5 GiB, S3 multipart limit


class UploadState(str, Enum):
    """Coordinator lifecycle states."""
    IDLE = 'idle'
    INITIATING = 'initiating'
    TRANSFERRING = 'transferring'
    FINALIZING = 'finalizing'
    COMPLETED = 'completed'
    FAILED = 'failed'

    @property
    def is_terminal(self) -> bool:
        return self in (UploadState.COMPLETED, UploadState.FAILED)


class TransferStatus(str, Enum):
    """Status of a gateway transfer session."""
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    FAILED = 'failed'


@dataclass(frozen=True)
class ChunkInfo:
    """
    One planned byte range of the source.

    Attributes:
        index: 0-based position in the plan
        start: Start offset (inclusive)
        end: End offset (exclusive)
    """
    index: int
    start: int
    end: int

    @property
    def size(self) -> int:
        """Returns chunk size."""
        return self.end - self.start

    @property
    def part_number(self) -> int:
        """1-based gateway part number."""
        return self.index + 1


@dataclass(frozen=True)
class PartResult:
    """
    Acknowledged part, kept after its payload is discarded.

    Attributes:
        part_number: 1-based sequence number
        ack_token: Opaque token returned by the gateway (ETag)
        size: Raw (unencoded) bytes covered by this part
    """
    part_number: int
    ack_token: str
    size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Gateway format for the complete() call."""
        return {'PartNumber': self.part_number, 'ETag': self.ack_token}


@dataclass
class ArchiveMetadata:
    """
    Descriptive metadata attached to an uploaded archive.

    Passed through the upload untouched and returned on the result.
    """
    platform: Optional[str] = None
    download_date: Optional[Union[str, date]] = None
    notes: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.download_date, date):
            self.download_date = self.download_date.isoformat()

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        if self.platform is not None:
            result['platform'] = self.platform
        if self.download_date is not None:
            result['download_date'] = self.download_date
        if self.notes is not None:
            result['notes'] = self.notes
        return result


@dataclass
class UploadConfig:
    """
    Configuration for chunked uploads.

    Attributes:
        chunk_size_bytes: Raw bytes per part (before base64)
        max_part_size_bytes: Largest part the gateway accepts
        max_concurrent_parts: Parts in flight at once (1 = strictly sequential)
    """
    chunk_size_bytes: int = DEFAULT_CHUNK_SIZE
    max_part_size_bytes: int = MAX_PART_SIZE
    max_concurrent_parts: int = 1

    def __post_init__(self):
        """Validate config."""
        if self.chunk_size_bytes <= 0:
            raise ConfigurationError(
                f"chunk_size_bytes must be positive, got {self.chunk_size_bytes}"
            )
        if self.chunk_size_bytes > self.max_part_size_bytes:
            raise ConfigurationError(
                f"chunk_size_bytes {self.chunk_size_bytes} exceeds gateway "
                f"maximum part size {self.max_part_size_bytes}"
            )
        if self.max_concurrent_parts < 1:
            raise ConfigurationError(
                f"max_concurrent_parts must be at least 1, got {self.max_concurrent_parts}"
            )


@dataclass
class TransferSession:
    """
    In-memory state of one multipart transfer.

    id and object_key are issued by the gateway and never modified here.
    """
    id: str
    object_key: str
    file_name: str
    total_size: int
    chunk_size: int
    parts: List[PartResult] = field(default_factory=list)
    status: TransferStatus = TransferStatus.PENDING
    completed_bytes: int = 0
    file_url: Optional[str] = None
    error: Optional[Exception] = None
    # Part count of the chunking plan; takes precedence over chunk_size
    planned_parts: Optional[int] = None

    @property
    def expected_parts(self) -> int:
        """Number of parts the plan produces (an empty file still has one)."""
        if self.planned_parts is not None:
            return self.planned_parts
        if self.total_size == 0:
            return 1
        return -(-self.total_size // self.chunk_size)

    def record(self, part: PartResult) -> None:
        """Merge an acknowledged part, keeping parts ordered by number."""
        self.parts.append(part)
        self.parts.sort(key=lambda p: p.part_number)
        self.completed_bytes += part.size

    def ordered_ack_list(self) -> List[Dict[str, Any]]:
        """Parts in gateway format, sorted by part number."""
        return [part.to_dict() for part in sorted(self.parts, key=lambda p: p.part_number)]

    def has_contiguous_parts(self) -> bool:
        """True when parts are exactly 1..expected_parts."""
        numbers = [part.part_number for part in self.parts]
        return numbers == list(range(1, self.expected_parts + 1))


@dataclass
class UploadProgress:
    """
    Upload progress information.

    Attributes:
        total_parts: Total number of parts
        completed_parts: Number of acknowledged parts
        total_bytes: Total source size
        completed_bytes: Raw bytes acknowledged so far
        finalized: True once the gateway assembled the object
    """
    total_parts: int
    completed_parts: int = 0
    total_bytes: int = 0
    completed_bytes: int = 0
    finalized: bool = False

    # Transfer alone never reports completion; only finalize does
    TRANSFER_CEILING = 0.99

    @property
    def fraction(self) -> float:
        """Progress in [0, 1]; 1.0 only after finalization."""
        if self.finalized:
            return 1.0
        if self.total_bytes == 0:
            return 0.0
        return min(self.completed_bytes / self.total_bytes, self.TRANSFER_CEILING)

    @property
    def percentage(self) -> float:
        """Returns upload progress as percentage."""
        return self.fraction * 100

    @property
    def is_complete(self) -> bool:
        """Returns True if upload is complete."""
        return self.finalized


@dataclass(frozen=True)
class UploadResult:
    """
    Result of a successful upload.

    Attributes:
        file_url: Stable locator of the assembled object
        object_key: Gateway object key
        upload_id: Gateway session id
        file_name: Name sent to the gateway
        file_size: Source size in bytes
        parts: Acknowledged parts in order
        metadata: Caller metadata, untouched
        response: Raw complete() reply
    """
    file_url: str
    object_key: str
    upload_id: str
    file_name: str
    file_size: int
    parts: List[PartResult] = field(default_factory=list)
    metadata: Optional[ArchiveMetadata] = None
    response: Dict[str, Any] = field(default_factory=dict)

    @property
    def part_count(self) -> int:
        return len(self.parts)
