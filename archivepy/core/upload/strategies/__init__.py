"""Upload strategies module."""
from .chunking import BaseChunkingStrategy, ChunkPlanner
from .encoding import Base64PartEncoder

__all__ = [
    'BaseChunkingStrategy',
    'ChunkPlanner',
    'Base64PartEncoder',
]
