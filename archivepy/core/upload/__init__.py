"""
Upload module for chunked archive uploads.

Splits a payload into fixed-size parts, base64-encodes each one and pushes
them through the multipart upload gateway in order.
"""
from .coordinator import UploadCoordinator
from .models import (
    UploadConfig,
    UploadResult,
    UploadProgress,
    UploadState,
    TransferSession,
    TransferStatus,
    PartResult,
    ChunkInfo,
    ArchiveMetadata
)
from .strategies import ChunkPlanner, Base64PartEncoder
from .protocols import (
    ChunkingStrategy,
    PartEncoderProtocol,
    FileReaderProtocol,
    UploadGatewayProtocol
)

__all__ = [
    # Main classes
    'UploadCoordinator',
    'ChunkPlanner',
    'Base64PartEncoder',

    # Models
    'UploadConfig',
    'UploadResult',
    'UploadProgress',
    'UploadState',
    'TransferSession',
    'TransferStatus',
    'PartResult',
    'ChunkInfo',
    'ArchiveMetadata',

    # Protocols
    'ChunkingStrategy',
    'PartEncoderProtocol',
    'FileReaderProtocol',
    'UploadGatewayProtocol',
]
