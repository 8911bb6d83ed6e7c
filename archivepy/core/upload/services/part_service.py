"""
Part upload service.

Encodes a single chunk and submits it to the gateway.
"""
from typing import Optional
import time

from ..models import ChunkInfo, PartResult
from ..protocols import UploadGatewayProtocol, PartEncoderProtocol
from ..strategies import Base64PartEncoder
from ...exceptions import GatewayError
from ...logging import get_logger


class PartUploader:
    """
    Submits encoded parts of one transfer session.

    Responsibilities:
    - Encode raw chunk bytes for the text transport
    - Send the part with its sequence number
    - Turn the gateway acknowledgment into a PartResult
    """

    def __init__(
        self,
        gateway: UploadGatewayProtocol,
        upload_id: str,
        file_key: str,
        token: Optional[str] = None,
        encoder: Optional[PartEncoderProtocol] = None
    ):
        """
        Initialize part uploader.

        Args:
            gateway: Upload gateway
            upload_id: Session id issued by start()
            file_key: Object key issued by start()
            token: Bearer token passed on every call
            encoder: Transport encoder (base64 by default)
        """
        self._gateway = gateway
        self._upload_id = upload_id
        self._file_key = file_key
        self._token = token
        self._encoder = encoder or Base64PartEncoder()
        self._logger = get_logger('archivepy.upload.part')

    async def upload_part(self, chunk: ChunkInfo, data: bytes) -> PartResult:
        """
        Encode and upload one chunk.

        Args:
            chunk: Planned range the data was read from
            data: Raw bytes of the range

        Returns:
            PartResult with the gateway ack token

        Raises:
            GatewayError: If the gateway rejects the part or the ack is invalid
        """
        part_number = chunk.part_number
        chunk_size_kb = len(data) / 1024
        upload_start = time.time()

        payload = self._encoder.encode(data)
        self._logger.debug(
            f"Uploading part {part_number} at offset {chunk.start} "
            f"({chunk_size_kb:.1f} KB, {len(payload)} encoded chars)"
        )

        response = await self._gateway.upload_part(
            self._upload_id,
            self._file_key,
            part_number,
            payload,
            token=self._token
        )
        del payload

        acked_number = int(response.get('PartNumber', part_number))
        if acked_number != part_number:
            raise GatewayError(
                f"Gateway acknowledged part {acked_number} for part {part_number}"
            )

        upload_time = time.time() - upload_start
        speed_kbps = (chunk_size_kb / upload_time) if upload_time > 0 else 0
        self._logger.debug(
            f"Part {part_number} acknowledged in {upload_time:.2f}s ({speed_kbps:.1f} KB/s)"
        )

        return PartResult(
            part_number=part_number,
            ack_token=response['ETag'],
            size=chunk.size
        )
