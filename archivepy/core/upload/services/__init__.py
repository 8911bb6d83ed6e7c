"""Upload services module."""
from .file_service import FileValidator, AsyncFileReader, FileSource, BytesSource
from .part_service import PartUploader

__all__ = [
    'FileValidator',
    'AsyncFileReader',
    'FileSource',
    'BytesSource',
    'PartUploader',
]
