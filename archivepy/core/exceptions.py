"""
Custom exceptions for archive transfer and inspection.

This module defines exception classes for uploads, gateway calls and
archive tree construction.
"""
from typing import Optional, Any


class ArchiveError(Exception):
    """Base exception for all archivepy errors."""

    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class ConfigurationError(ArchiveError):
    """Exception raised for invalid configuration values."""
    pass


class GatewayError(ArchiveError):
    """Exception raised when the upload gateway rejects a request."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message from the gateway
            status: HTTP status code (if available)
        """
        self.status = status
        super().__init__(message, error_code=status)


class TransferError(ArchiveError):
    """Base exception for a failed transfer session."""

    def __init__(
        self,
        message: str,
        session: Any = None,
        error_code: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            session: TransferSession that failed (if one was created)
            error_code: Numeric error code (if available)
        """
        self.session = session
        super().__init__(message, error_code)


class InitiationError(TransferError):
    """Exception raised when the gateway refuses to start an upload."""
    pass


class PartUploadError(TransferError):
    """Exception raised when a single part is not acknowledged."""

    def __init__(
        self,
        message: str,
        sequence_number: int,
        session: Any = None,
        error_code: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            sequence_number: 1-based number of the failed part
            session: TransferSession that failed
            error_code: Numeric error code (if available)
        """
        self.sequence_number = sequence_number
        super().__init__(message, session, error_code)


class FinalizationError(TransferError):
    """Exception raised when the gateway cannot assemble the object."""
    pass


class DecodeError(ArchiveError):
    """Exception raised when an archive, manifest or payload is unreadable."""
    pass


class TreeConflictError(ArchiveError):
    """Exception raised in strict mode when a path is both file and directory."""

    def __init__(self, message: str, path: str) -> None:
        self.path = path
        super().__init__(message)


class ConflictWarning(UserWarning):
    """
    Non-fatal record of a File/Directory conflict.

    The last declaration of the path wins; the warning is logged and kept
    on the trie for callers that want to surface it.
    """

    def __init__(self, path: str, previous: str, current: str) -> None:
        self.path = path
        self.previous = previous
        self.current = current
        super().__init__(
            f"'{path}' declared as {previous} and {current}; keeping {current}"
        )
