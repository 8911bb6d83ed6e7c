"""
archivepy - Async chunked uploads and tree inspection for exported archives.

Usage:
    >>> from archivepy import ArchiveClient
    >>>
    >>> async with ArchiveClient("https://example.com/uploadToS3") as client:
    ...     result = await client.upload("export.zip", token=token)
    ...     trie = await client.inspect(result.file_url)
    ...     for name, node in trie.list():
    ...         print(name)
"""
import logging
from .client import ArchiveClient
from .core.logging import set_level

# Configuration
from .core.api import (
    GatewayConfig,
    TimeoutConfig,
    AsyncGatewayClient
)

# Upload
from .core.upload import (
    UploadCoordinator,
    UploadConfig,
    UploadResult,
    UploadProgress,
    ArchiveMetadata,
    ChunkPlanner,
    Base64PartEncoder
)

# Inspection
from .core.archive import (
    ArchiveInspector,
    ArchiveEntry,
    PathTrie,
    TreeNode,
    TreeViewState,
    build_tree
)

from .core.exceptions import (
    ArchiveError,
    ConfigurationError,
    GatewayError,
    TransferError,
    InitiationError,
    PartUploadError,
    FinalizationError,
    DecodeError,
    TreeConflictError,
    ConflictWarning
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for archivepy modules.

    Args:
        level: Logging level (default: logging.INFO)
    """
    set_level(level)


__all__ = [
    'ArchiveClient',
    'GatewayConfig',
    'TimeoutConfig',
    'AsyncGatewayClient',
    'UploadCoordinator',
    'UploadConfig',
    'UploadResult',
    'UploadProgress',
    'ArchiveMetadata',
    'ChunkPlanner',
    'Base64PartEncoder',
    'ArchiveInspector',
    'ArchiveEntry',
    'PathTrie',
    'TreeNode',
    'TreeViewState',
    'build_tree',
    'ArchiveError',
    'ConfigurationError',
    'GatewayError',
    'TransferError',
    'InitiationError',
    'PartUploadError',
    'FinalizationError',
    'DecodeError',
    'TreeConflictError',
    'ConflictWarning',
    'setup_logging',
]
