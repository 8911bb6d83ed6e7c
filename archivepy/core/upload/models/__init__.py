"""Upload models."""
from .upload_models import (
    DEFAULT_CHUNK_SIZE,
    MAX_PART_SIZE,
    UploadState,
    TransferStatus,
    ChunkInfo,
    PartResult,
    ArchiveMetadata,
    UploadConfig,
    TransferSession,
    UploadProgress,
    UploadResult
)

__all__ = [
    'DEFAULT_CHUNK_SIZE',
    'MAX_PART_SIZE',
    'UploadState',
    'TransferStatus',
    'ChunkInfo',
    'PartResult',
    'ArchiveMetadata',
    'UploadConfig',
    'TransferSession',
    'UploadProgress',
    'UploadResult'
]
