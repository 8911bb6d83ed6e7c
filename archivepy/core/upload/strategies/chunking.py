"""
Chunking strategies for file uploads.

Implements Strategy Pattern for chunk planning.
"""
from abc import ABC, abstractmethod
from typing import Iterator, List

from ..models import ChunkInfo, DEFAULT_CHUNK_SIZE, MAX_PART_SIZE
from ...exceptions import ConfigurationError


class BaseChunkingStrategy(ABC):
    """Abstract base class for chunking strategies."""

    @abstractmethod
    def plan(self, total_size: int) -> Iterator[ChunkInfo]:
        """Yield chunk boundaries."""
        pass

    @abstractmethod
    def count(self, total_size: int) -> int:
        """Number of chunks for total_size."""
        pass

    def calculate_chunks(self, total_size: int) -> List[ChunkInfo]:
        """Materialize the whole plan."""
        return list(self.plan(total_size))


class ChunkPlanner(BaseChunkingStrategy):
    """
    Fixed-size chunk planner for multipart uploads.

    Every range is exactly chunk_size bytes except the last, which is in
    (0, chunk_size]. An empty payload yields a single empty range so that
    empty files still produce one upload attempt.
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_part_size: int = MAX_PART_SIZE
    ):
        """
        Initialize with chunk size.

        Args:
            chunk_size: Size of each chunk in bytes
            max_part_size: Largest part the gateway accepts

        Raises:
            ConfigurationError: If chunk_size is not in (0, max_part_size]
        """
        if chunk_size <= 0:
            raise ConfigurationError(f"Chunk size must be positive, got {chunk_size}")
        if chunk_size > max_part_size:
            raise ConfigurationError(
                f"Chunk size {chunk_size} exceeds maximum part size {max_part_size}"
            )
        self.chunk_size = chunk_size
        self.max_part_size = max_part_size

    def plan(self, total_size: int) -> Iterator[ChunkInfo]:
        """
        Yield fixed-size chunk boundaries.

        Args:
            total_size: Total payload size in bytes

        Returns:
            Generator of ChunkInfo covering [0, total_size)
        """
        if total_size < 0:
            raise ConfigurationError(f"Payload size cannot be negative, got {total_size}")
        return self._iter_ranges(total_size)

    def _iter_ranges(self, total_size: int) -> Iterator[ChunkInfo]:
        if total_size == 0:
            yield ChunkInfo(index=0, start=0, end=0)
            return

        index = 0
        position = 0
        while position < total_size:
            end = min(position + self.chunk_size, total_size)
            yield ChunkInfo(index=index, start=position, end=end)
            position = end
            index += 1

    def count(self, total_size: int) -> int:
        """Number of chunks plan() yields."""
        if total_size < 0:
            raise ConfigurationError(f"Payload size cannot be negative, got {total_size}")
        if total_size == 0:
            return 1
        return -(-total_size // self.chunk_size)
