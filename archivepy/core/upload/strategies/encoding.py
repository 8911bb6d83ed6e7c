"""Transport encoding for upload parts."""
import base64
import binascii

from ...exceptions import DecodeError


class Base64PartEncoder:
    """
    Standard base64 encoder/decoder for part payloads.

    The gateway decodes with atob(), so the standard alphabet with padding
    is required (not the URL-safe variant).
    """

    @staticmethod
    def encode(data: bytes) -> str:
        """Encodes bytes to padded standard Base64."""
        return base64.b64encode(data).decode('ascii')

    @staticmethod
    def decode(text: str) -> bytes:
        """Decodes padded standard Base64, rejecting anything else."""
        try:
            return base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"Invalid base64 payload: {e}") from e

    @staticmethod
    def encoded_size(raw_size: int) -> int:
        """Length of the encoded text for raw_size bytes."""
        return 4 * ((raw_size + 2) // 3)
