"""
Upload coordinator.

Drives the three-phase multipart protocol (initiate, transfer, finalize)
against the upload gateway using injected dependencies.
"""
import asyncio
import time
from pathlib import Path
from typing import Dict, Optional, Union, Callable

from .protocols import (
    ChunkingStrategy,
    PartEncoderProtocol,
    FileReaderProtocol,
    UploadGatewayProtocol
)
from .models import (
    ArchiveMetadata,
    ChunkInfo,
    PartResult,
    TransferSession,
    TransferStatus,
    UploadConfig,
    UploadProgress,
    UploadResult,
    UploadState
)
from .strategies import ChunkPlanner
from .services import AsyncFileReader, FileSource, BytesSource, PartUploader
from ..exceptions import (
    TransferError,
    InitiationError,
    PartUploadError,
    FinalizationError
)
from ..logging import get_logger

logger = get_logger('archivepy.upload.coordinator')

UploadSource = Union[str, Path, bytes, bytearray]


class UploadCoordinator:
    """
    Coordinates one multipart upload.

    State machine:
        IDLE -> INITIATING -> TRANSFERRING -> FINALIZING -> COMPLETED
    with FAILED reachable from every non-terminal state. A coordinator
    drives a single submission; create a new one to retry.

    Parts are submitted in increasing order. With the default
    max_concurrent_parts=1 exactly one part is in flight, so only one
    encoded chunk is held in memory.
    """

    def __init__(
        self,
        gateway: UploadGatewayProtocol,
        config: Optional[UploadConfig] = None,
        chunking_strategy: Optional[ChunkingStrategy] = None,
        encoder: Optional[PartEncoderProtocol] = None,
        file_reader: Optional[FileReaderProtocol] = None,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None
    ):
        """
        Initialize upload coordinator.

        Args:
            gateway: Upload gateway (start / upload_part / complete)
            config: Upload configuration
            chunking_strategy: Strategy for planning parts
            encoder: Transport encoder for part payloads
            file_reader: File reader implementation
            progress_callback: Called after every ack and once at completion
        """
        self._gateway = gateway
        self._config = config or UploadConfig()
        self._chunking = chunking_strategy or ChunkPlanner(
            self._config.chunk_size_bytes,
            self._config.max_part_size_bytes
        )
        self._encoder = encoder
        self._file_reader = file_reader
        self._progress_callback = progress_callback

        self._state = UploadState.IDLE
        self._session: Optional[TransferSession] = None
        self._progress: Optional[UploadProgress] = None

    @property
    def state(self) -> UploadState:
        return self._state

    @property
    def session(self) -> Optional[TransferSession]:
        """Transfer session (None until the gateway opened one)."""
        return self._session

    @property
    def progress(self) -> Optional[UploadProgress]:
        return self._progress

    async def submit(
        self,
        source: UploadSource,
        metadata: Optional[ArchiveMetadata] = None,
        *,
        token: Optional[str] = None,
        file_name: Optional[str] = None
    ) -> UploadResult:
        """
        Upload a file or in-memory payload.

        Args:
            source: Path to a file, or raw bytes
            metadata: Descriptive metadata returned on the result
            token: Bearer token passed on every gateway call
            file_name: Name sent to the gateway (required for bytes)

        Returns:
            UploadResult with the final object locator

        Raises:
            FileNotFoundError: If the source file doesn't exist
            ValueError: If the source is not a regular file
            InitiationError: If the gateway refuses to start the upload
            PartUploadError: If any part fails (complete() is never called)
            FinalizationError: If the gateway cannot assemble the object
        """
        if self._state is not UploadState.IDLE:
            raise RuntimeError(
                f"Coordinator already used (state={self._state.value}); create a new one"
            )

        payload = self._open_source(source, file_name)
        file_size_mb = payload.size / (1024 * 1024)
        logger.info(f"Starting upload: {payload.name} ({file_size_mb:.2f} MB)")

        total_parts = self._chunking.count(payload.size)
        session = await self._initiate(payload.name, payload.size, total_parts, token)

        uploader = PartUploader(
            self._gateway,
            session.id,
            session.object_key,
            token=token,
            encoder=self._encoder
        )

        self._state = UploadState.TRANSFERRING
        session.status = TransferStatus.IN_PROGRESS
        self._progress = UploadProgress(total_parts=total_parts, total_bytes=payload.size)
        logger.info(f"File split into {total_parts} parts of up to {session.chunk_size} bytes")

        await payload.open()
        try:
            await self._transfer_parts(payload, uploader)
        finally:
            await payload.close()

        response = await self._finalize(token)

        return UploadResult(
            file_url=session.file_url,
            object_key=session.object_key,
            upload_id=session.id,
            file_name=payload.name,
            file_size=payload.size,
            parts=list(session.parts),
            metadata=metadata,
            response=response
        )

    def _open_source(self, source: UploadSource, file_name: Optional[str]):
        if isinstance(source, (bytes, bytearray)):
            if not file_name:
                raise ValueError("file_name is required when uploading raw bytes")
            return BytesSource(bytes(source), file_name)
        return FileSource(source, name=file_name, reader=self._file_reader or AsyncFileReader())

    async def _initiate(
        self,
        file_name: str,
        total_size: int,
        total_parts: int,
        token: Optional[str]
    ) -> TransferSession:
        """Phase 1: ask the gateway for a session id and object key."""
        self._state = UploadState.INITIATING
        logger.info("Requesting multipart upload from gateway")

        try:
            started = await self._gateway.start(file_name, token=token)
            upload_id, object_key = started['uploadId'], started['fileKey']
        except Exception as e:
            raise self._fail(InitiationError(f"Could not start upload of {file_name}: {e}")) from e

        self._session = TransferSession(
            id=upload_id,
            object_key=object_key,
            file_name=file_name,
            total_size=total_size,
            chunk_size=getattr(self._chunking, 'chunk_size', self._config.chunk_size_bytes),
            planned_parts=total_parts
        )
        logger.debug(f"Upload session {upload_id} opened for key {object_key}")
        return self._session

    async def _transfer_parts(self, payload, uploader: PartUploader) -> None:
        """
        Phase 2: read, encode and submit every planned part.

        At most max_concurrent_parts uploads are in flight; the next chunk is
        only read once a slot frees up.
        """
        limit = self._config.max_concurrent_parts
        active: Dict[asyncio.Task, ChunkInfo] = {}
        transfer_start = time.time()

        try:
            for chunk in self._chunking.plan(payload.size):
                if len(active) >= limit:
                    await self._drain(active, asyncio.FIRST_COMPLETED)

                data = await payload.read(chunk.start, chunk.end)
                if data is None:
                    raise self._fail(PartUploadError(
                        f"Failed to read part {chunk.part_number} ({chunk.start}-{chunk.end})",
                        chunk.part_number
                    ))

                task = asyncio.create_task(uploader.upload_part(chunk, data))
                active[task] = chunk
                del data

            if active:
                await self._drain(active, asyncio.ALL_COMPLETED)
        finally:
            if active:
                for task in active:
                    task.cancel()
                await asyncio.gather(*active, return_exceptions=True)

        elapsed = time.time() - transfer_start
        logger.info(f"All {len(self._session.parts)} parts acknowledged in {elapsed:.2f}s")

    async def _drain(self, active: Dict[asyncio.Task, ChunkInfo], return_when) -> None:
        """Wait for in-flight parts and merge their acknowledgments."""
        done, _ = await asyncio.wait(active, return_when=return_when)

        for task in sorted(done, key=lambda t: active[t].index):
            chunk = active.pop(task)
            try:
                part = task.result()
            except Exception as e:
                logger.error(f"Part {chunk.part_number} failed: {e}")
                raise self._fail(PartUploadError(
                    f"Part {chunk.part_number} was not acknowledged: {e}",
                    chunk.part_number
                )) from e
            self._acknowledge(part)

    def _acknowledge(self, part: PartResult) -> None:
        self._session.record(part)
        self._progress.completed_parts += 1
        self._progress.completed_bytes = self._session.completed_bytes

        if self._progress_callback:
            self._progress_callback(self._progress)

    async def _finalize(self, token: Optional[str]) -> Dict:
        """Phase 3: hand the ordered ack list to the gateway."""
        session = self._session
        self._state = UploadState.FINALIZING

        if not session.has_contiguous_parts():
            numbers = [p.part_number for p in session.parts]
            raise self._fail(FinalizationError(
                f"Refusing to finalize with parts {numbers}; expected 1..{session.expected_parts}"
            ))

        logger.info(f"Finalizing upload {session.id} with {len(session.parts)} parts")
        try:
            response = await self._gateway.complete(
                session.id,
                session.object_key,
                session.ordered_ack_list(),
                token=token
            )
            file_url = response['fileUrl']
        except Exception as e:
            raise self._fail(FinalizationError(f"Could not finalize upload {session.id}: {e}")) from e

        session.file_url = file_url
        session.status = TransferStatus.COMPLETED
        self._state = UploadState.COMPLETED
        self._progress.finalized = True
        logger.info(f"Upload completed: {file_url}")

        if self._progress_callback:
            self._progress_callback(self._progress)

        return response

    def _fail(self, error: TransferError) -> TransferError:
        """Move to FAILED and attach the session to the error."""
        self._state = UploadState.FAILED
        error.session = self._session
        if self._session is not None:
            self._session.status = TransferStatus.FAILED
            self._session.error = error
        logger.error(f"Upload failed: {error}")
        return error
