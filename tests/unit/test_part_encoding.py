"""Tests for part payload encoding."""
import os
import base64

import pytest
from archivepy.core.upload.strategies.encoding import Base64PartEncoder
from archivepy.core.exceptions import DecodeError


class TestBase64PartEncoder:
    """Test suite for Base64PartEncoder."""

    def test_encode_basic(self):
        """Test basic encoding uses the standard padded alphabet."""
        encoder = Base64PartEncoder()
        encoded = encoder.encode(b"Hello")

        assert isinstance(encoded, str)
        assert encoded == "SGVsbG8="

    def test_encode_matches_standard_base64(self):
        """Test output is what atob() on the gateway expects."""
        data = b"\xfb\xff\xfe" * 10
        encoded = Base64PartEncoder.encode(data)

        assert encoded == base64.b64encode(data).decode()
        assert '+' in encoded or '/' in encoded

    def test_encode_decode_roundtrip(self):
        """Test roundtrip with empty, short and binary payloads."""
        encoder = Base64PartEncoder()
        test_cases = [
            b"",
            b"a",
            b"ab",
            b"abc",
            b"\x00\x01\x02\x03",
            b"\xff" * 100,
            bytes(range(256)),
            os.urandom(4099),
        ]

        for data in test_cases:
            assert encoder.decode(encoder.encode(data)) == data, f"Roundtrip failed for {data[:20]!r}"

    def test_encoded_size(self):
        """Test encoded size prediction."""
        for size in (0, 1, 2, 3, 4, 5 * 1024 * 1024):
            assert Base64PartEncoder.encoded_size(size) == len(Base64PartEncoder.encode(b"x" * size))

    def test_decode_invalid(self):
        """Test malformed text raises DecodeError."""
        with pytest.raises(DecodeError):
            Base64PartEncoder.decode("not base64!")

    def test_decode_rejects_missing_padding(self):
        """Test unpadded input is rejected."""
        with pytest.raises(DecodeError):
            Base64PartEncoder.decode("SGVsbG8")
