"""Watch face transfer engine.

The watch drives the transfer: after the prep command announces the file
length it requests chunks by index over the notify characteristic and the
engine serves whatever it asks for, in whatever order. Once the watch
reports completion the engine acknowledges it and activates the uploaded
face.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from .exceptions import (
    BLEConnectionError,
    BLETimeoutError,
    LinkWriteFailedError,
    NotificationStreamClosedError,
    TransferError,
    TransferTimeoutError,
    UnexpectedFrameError,
)
from .models.enums import TransferState
from .models.transfer import TransferResult, TransferSession
from .protocol.chunking import chunk_range, progress_percent
from .protocol.commands import (
    CHUNK_SIZE,
    COMMAND_WRITE_UUID,
    DATA_WRITE_UUID,
    DEFAULT_FACE_SLOT,
    FACE_SLOTS,
    FILE_ID,
    NOTIFY_UUID,
    Opcode,
    build_completion_ack_command,
    build_prep_command,
    build_select_face_command,
)
from .protocol.responses import (
    Frame,
    format_frame,
    parse_chunk_request,
    parse_completion,
    parse_frame,
)

if TYPE_CHECKING:
    from .transport import BLEConnection

_LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class TransferEngine:
    """Uploads a watch face over an established, qualified connection.

    Usage:
        engine = TransferEngine(connection, notification_timeout=30.0)
        result = await engine.upload(payload)

    One transfer at a time; the engine never writes ahead of the watch's
    requests.
    """

    def __init__(
            self,
            connection: BLEConnection,
            *,
            chunk_size: int = CHUNK_SIZE,
            notification_timeout: float | None = None,
            settle_delay: float = 1.0,
            face_slot: int = FACE_SLOTS[DEFAULT_FACE_SLOT],
            progress_callback: ProgressCallback | None = None,
    ):
        """Initialize transfer engine.

        Args:
            connection: Connected BLEConnection (or compatible object)
            chunk_size: Bytes per data write (default: 244)
            notification_timeout: Seconds to wait per notification, None waits forever
            settle_delay: Seconds to wait after the final write (default: 1)
            face_slot: Slot byte activated after a successful upload
            progress_callback: Called with the percentage after each chunk
        """
        if not 0 <= face_slot <= 0xFF:
            raise ValueError(f"Face slot {face_slot} out of range 0-255")

        self._connection = connection
        self.chunk_size = chunk_size
        self.notification_timeout = notification_timeout
        self.settle_delay = settle_delay
        self.face_slot = face_slot
        self.progress_callback = progress_callback
        self._active_callback: ProgressCallback | None = None

        self._session: TransferSession | None = None
        self._busy = False
        self._subscribed = False
        self._handlers: dict[int, Callable[[TransferSession, Frame], Awaitable[None]]] = {
            Opcode.CHUNK_REQUEST: self._handle_chunk_request,
            Opcode.FILE_LENGTH: self._handle_completion,
        }

    @property
    def session(self) -> TransferSession | None:
        """State of the current or most recent upload."""
        return self._session

    @property
    def busy(self) -> bool:
        return self._busy

    def _claim(self) -> None:
        if self._busy:
            raise RuntimeError("A transfer is already in progress on this connection")
        self._busy = True

    async def upload(
            self,
            payload: bytes,
            progress_callback: ProgressCallback | None = None,
    ) -> TransferResult:
        """Upload payload and activate it as the current watch face.

        Args:
            payload: Watch face file contents
            progress_callback: Overrides the engine-wide progress callback

        Returns:
            TransferResult with the raw completion value reported by the watch

        Raises:
            ValueError: If payload is larger than 4 GiB
            RuntimeError: If another transfer is running
            TransferError: If the session was aborted
        """
        prep = build_prep_command(len(payload))

        self._claim()
        session = TransferSession(payload)
        self._session = session
        self._active_callback = progress_callback or self.progress_callback

        try:
            await self._negotiate(session, prep)
            await self._serve(session)
            await self._select_face(self.face_slot)
            session.state = TransferState.DONE
        except TransferError as e:
            session.abort(str(e))
            _LOGGER.error("Transfer aborted: %s", e)
            raise
        finally:
            # Cancellation and KeyboardInterrupt end the session too
            if not session.state.is_terminal:
                _LOGGER.error("Transfer interrupted in state %s", session.state.value)
                session.abort("Transfer interrupted")
            try:
                if self._subscribed:
                    await self._connection.stop_notify(NOTIFY_UUID)
            finally:
                self._subscribed = False
                self._busy = False

        _LOGGER.info(
            "Transfer complete: %d bytes, %d chunks served, completion value 0x%08x",
            session.file_length,
            session.chunks_served,
            session.completion_value,
        )

        return TransferResult(
            file_length=session.file_length,
            chunks_served=session.chunks_served,
            unexpected_frames=session.unexpected_frames,
            completion_value=session.completion_value,
            face_slot=self.face_slot,
        )

    async def select_face(self, slot_id: int) -> None:
        """Activate the watch face stored in slot_id.

        Raises:
            ValueError: If slot_id is outside 0-255
            RuntimeError: If a transfer is running
            LinkWriteFailedError: If the write fails
        """
        self._claim()
        try:
            await self._select_face(slot_id)
        finally:
            self._busy = False

    async def _negotiate(self, session: TransferSession, prep: bytes) -> None:
        session.state = TransferState.NEGOTIATING

        # Subscribe first so the first chunk request cannot be missed
        try:
            await self._connection.start_notify(NOTIFY_UUID)
        except BLEConnectionError as e:
            raise LinkWriteFailedError(f"Subscribing to notifications failed: {e}") from e
        self._subscribed = True

        _LOGGER.info("Sending watch face (%d bytes)", session.file_length)
        await self._write(COMMAND_WRITE_UUID, prep)

    async def _serve(self, session: TransferSession) -> None:
        while session.state is not TransferState.COMPLETING:
            data = await self._next_notification()
            _LOGGER.debug("RECV: %s", format_frame(data))

            try:
                frame = parse_frame(data)
                handler = self._handlers.get(frame.opcode)
                if handler is None or frame.file_id != FILE_ID:
                    raise UnexpectedFrameError(f"Unhandled frame {format_frame(data)}")
            except UnexpectedFrameError as e:
                session.unexpected_frames += 1
                _LOGGER.warning("Unexpected data from watch: %s", e)
                continue

            await handler(session, frame)

    async def _next_notification(self) -> bytes:
        try:
            data = await self._connection.next_notification(self.notification_timeout)
        except BLETimeoutError as e:
            raise TransferTimeoutError(
                f"Watch sent nothing for {self.notification_timeout}s"
            ) from e

        if data is None:
            raise NotificationStreamClosedError(
                "Notification stream closed before the watch reported completion"
            )
        return data

    async def _handle_chunk_request(self, session: TransferSession, frame: Frame) -> None:
        index = parse_chunk_request(frame)
        session.state = TransferState.SERVING

        if index != session.expected_index:
            _LOGGER.warning(
                "Watch requested chunk %d, expected %d",
                index,
                session.expected_index,
            )
        session.expected_index = index + 1

        try:
            start, end = chunk_range(index, session.file_length, self.chunk_size)
        except ValueError as e:
            _LOGGER.warning("Not serving chunk %d: %s", index, e)
            return

        _LOGGER.debug("Sending chunk #%d [%d:%d]", index, start, end)
        await self._write(DATA_WRITE_UUID, session.payload[start:end])
        session.chunks_served += 1

        if self._active_callback is not None:
            self._active_callback(
                progress_percent(index, session.file_length, self.chunk_size)
            )

    async def _handle_completion(self, session: TransferSession, frame: Frame) -> None:
        # TODO: verify the value once its checksum algorithm is known
        session.completion_value = parse_completion(frame)
        _LOGGER.info(
            "All data received by watch (completion value 0x%08x)",
            session.completion_value,
        )

        await self._write(COMMAND_WRITE_UUID, build_completion_ack_command())
        session.state = TransferState.COMPLETING

    async def _select_face(self, slot_id: int) -> None:
        command = build_select_face_command(slot_id)
        _LOGGER.info("Activating watch face slot 0x%02x", slot_id)
        await self._write(COMMAND_WRITE_UUID, command)

        # The watch needs time to commit to flash before the link goes away
        if self.settle_delay > 0:
            await asyncio.sleep(self.settle_delay)

    async def _write(self, uuid: str, data: bytes) -> None:
        if uuid == COMMAND_WRITE_UUID:
            _LOGGER.debug("SEND: %s", format_frame(data))
        try:
            await self._connection.write(uuid, data, response=False)
        except BLEConnectionError as e:
            raise LinkWriteFailedError(str(e)) from e
