"""TCP connection to a FlashForge Adventurer printer.

The printer listens on port 8899 and handles one command at a time: each
command is written as a text line and the next command may only be sent
once the previous response has been fully read. File uploads switch to
binary frames between the ``M28`` and ``M29`` handshakes.
"""

from __future__ import annotations

import logging
import socket
import threading
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO

from ..errors import (
    ConnectError,
    NotReadyError,
    PrinterConnectionLostError,
    UnknownCommandError,
)
from ..models import FirmwareInfo, PrinterStatus, PrinterTemperature
from ..protocol.commands import (
    build_begin_store,
    build_end_store,
    build_print_file,
    build_query_firmware,
    build_query_status,
    build_query_temperature,
)
from ..protocol.framing import PACKET_SIZE, frame_count, iter_frames
from ..protocol.parser import ResponseReader

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8899
DEFAULT_CONNECT_TIMEOUT = 10.0
STORED_FILE_SUFFIX = ".g"


class ConnectionState(Enum):
    """Lifecycle of a :class:`PrinterConnection`."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    READY = "ready"


def remote_name_for(local_path: str | Path) -> str:
    """Name to store a local G-code file under on the printer.

    The printer only accepts ``.g`` files, so ``part.gcode`` becomes
    ``part.g``.
    """
    return Path(local_path).stem + STORED_FILE_SUFFIX


class PrinterConnection:
    """Manages the TCP session with the printer.

    Usage::

        with PrinterConnection("192.168.1.50") as printer:
            status = printer.query_status()
            printer.store_file("part.gcode", "part.g")
            printer.print_file("part.g")

    All calls block. Reads have no timeout, so a printer that stops
    answering blocks the caller until :meth:`close` is called from another
    thread or the peer drops the connection.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        connect_timeout: float | None = DEFAULT_CONNECT_TIMEOUT,
        packet_size: int = PACKET_SIZE,
    ) -> None:
        self._host = host
        self._port = port
        self._connect_timeout = connect_timeout
        self._packet_size = packet_size
        self._socket: socket.socket | None = None
        self._stream: BinaryIO | None = None
        self._reader: ResponseReader | None = None
        self._state = ConnectionState.DISCONNECTED
        self._closed = False
        self._lock = threading.Lock()

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is ConnectionState.READY

    def __enter__(self) -> PrinterConnection:
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def connect(self) -> PrinterStatus:
        """Open the connection and poll the printer once.

        The printer ignores every command until it has been asked for its
        status, so a status query is always sent first.

        Returns:
            The status returned by the initial poll.

        Raises:
            ConnectError: If the TCP connection cannot be established.
            NotReadyError: If this connection was already used.
        """
        if self._closed or self._state is not ConnectionState.DISCONNECTED:
            raise NotReadyError(
                f"Connection to {self._host}:{self._port} cannot be reopened "
                f"(state: {self._state.value})"
            )

        self._state = ConnectionState.CONNECTING
        logger.debug("Connecting to %s:%d", self._host, self._port)
        try:
            sock = socket.create_connection(
                (self._host, self._port), timeout=self._connect_timeout
            )
        except OSError as e:
            self._state = ConnectionState.DISCONNECTED
            raise ConnectError(
                f"Could not connect to printer at {self._host}:{self._port}: {e}"
            ) from e

        # Responses may take arbitrarily long; only the connect is bounded.
        sock.settimeout(None)
        self._socket = sock
        self._stream = sock.makefile("rb")
        self._reader = ResponseReader(self._stream)

        try:
            with self._lock:
                status = self._exchange(build_query_status(), PrinterStatus)
        except BaseException:
            self.close()
            raise

        self._state = ConnectionState.READY
        logger.info(
            "Connected to %s:%d (status: %s)",
            self._host, self._port, status.machine_status if status else None,
        )
        return status

    def close(self) -> None:
        """Close the connection. Safe to call more than once.

        May be called from another thread to abort a command that is
        blocked waiting for the printer; that command then raises
        :class:`PrinterConnectionLostError`.
        """
        if self._closed:
            return
        self._closed = True
        self._state = ConnectionState.DISCONNECTED

        stream, sock = self._stream, self._socket
        self._stream = None
        self._socket = None
        self._reader = None

        # Wake any thread blocked in recv() before touching the stream,
        # whose close() waits for the reader's buffer lock.
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError as e:
                logger.debug("Socket shutdown failed: %s", e)
        try:
            if sock is not None:
                sock.close()
            if stream is not None:
                stream.close()
        except OSError as e:
            logger.warning("Error closing connection: %s", e)
        finally:
            logger.info("Disconnected from %s:%d", self._host, self._port)

    def _require_ready(self) -> None:
        if self._state is not ConnectionState.READY:
            raise NotReadyError(
                f"Not connected to printer (state: {self._state.value})"
            )

    def _send(self, data: bytes) -> None:
        sock = self._socket
        if sock is None:
            raise PrinterConnectionLostError("Connection to printer was closed")
        try:
            sock.sendall(data)
        except OSError:
            self.close()
            raise

    def _exchange(self, command: bytes, expected: type | None = None) -> Any:
        """Send one command line and read its response. Caller holds the lock.

        Connection loss and responses for unknown commands close the
        session; a printer error line leaves it usable.
        """
        reader = self._reader
        if reader is None:
            raise PrinterConnectionLostError("Connection to printer was closed")
        logger.debug("Sending %r", command.strip())
        self._send(command)
        try:
            return reader.read_response(expected)
        except (PrinterConnectionLostError, UnknownCommandError, OSError):
            self.close()
            raise

    def query_status(self) -> PrinterStatus:
        """Ask the printer for its machine status and endstop readings."""
        with self._lock:
            self._require_ready()
            return self._exchange(build_query_status(), PrinterStatus)

    def query_temperature(self) -> PrinterTemperature:
        """Ask the printer for its current temperatures."""
        with self._lock:
            self._require_ready()
            return self._exchange(build_query_temperature(), PrinterTemperature)

    def query_firmware_info(self) -> FirmwareInfo:
        """Ask the printer for its machine type and firmware version."""
        with self._lock:
            self._require_ready()
            return self._exchange(build_query_firmware(), FirmwareInfo)

    def print_file(self, remote_name: str) -> None:
        """Start printing a file already stored on the printer."""
        with self._lock:
            self._require_ready()
            self._exchange(build_print_file(remote_name))
        logger.info("Started printing %s", remote_name)

    def store_file(self, local_path: str | Path, remote_name: str) -> None:
        """Upload a local file to printer storage as *remote_name*.

        The file is read in full before anything is sent, so a missing or
        unreadable file raises ``OSError`` without touching the connection.
        A failure during the transfer leaves nothing to resume; upload the
        file again.

        Raises:
            NotReadyError: If the connection is not ready.
            OSError: If the local file cannot be read.
            PrinterProtocolError: If the printer rejects either handshake.
        """
        self._require_ready()
        data = Path(local_path).read_bytes()
        begin = build_begin_store(len(data), remote_name)

        with self._lock:
            self._require_ready()
            logger.info(
                "Uploading %s as %s (%d bytes, %d frames)",
                local_path, remote_name, len(data),
                frame_count(len(data), self._packet_size),
            )
            self._exchange(begin)

            for frame in iter_frames(data, self._packet_size):
                self._send(frame.to_bytes(self._packet_size))
                logger.debug("Sent %r", frame)

            self._exchange(build_end_store())
        logger.info("Upload of %s complete", remote_name)


def connect(
    host: str,
    port: int = DEFAULT_PORT,
    connect_timeout: float | None = DEFAULT_CONNECT_TIMEOUT,
) -> PrinterConnection:
    """Open a ready :class:`PrinterConnection` to *host*."""
    connection = PrinterConnection(host, port, connect_timeout=connect_timeout)
    connection.connect()
    return connection
