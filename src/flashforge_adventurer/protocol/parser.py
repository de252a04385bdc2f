"""Line-oriented response parser.

A response from the printer looks like::

    CMD M119 Received.
    Endstop: X-max:1 Y-max:0 Z-max:0
    MachineStatus: READY
    MoveMode: READY
    ok

Error responses replace everything with a single line ending in
``error.``, optionally prefixed by an error code (``E1 error.``).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from ..errors import (
    PrinterConnectionLostError,
    PrinterProtocolError,
    UnexpectedResponseError,
)
from .decoders import decode_response

logger = logging.getLogger(__name__)

CMD_RECEIVED_RE = re.compile(r"CMD (?P<code>[MG][0-9]+) Received\.")
OK_LINES = ("ok", "ok.")
ERROR_SUFFIX = "error."
ENCODING = "utf-8"


@dataclass
class ResponseEnvelope:
    """Lines collected for one response, discarded after decoding."""

    command_id: str | None = None
    lines: list[str] = field(default_factory=list)


def parse_error_code(line: str) -> str:
    """Extract the error code from an ``<code> error.`` line.

    Returns ``""`` when the line is not exactly two tokens.
    """
    parts = line.split()
    if len(parts) == 2:
        return parts[0]
    return ""


class ResponseReader:
    """Reads one response at a time from a binary line source.

    The source is usually ``socket.makefile("rb")`` but anything with a
    ``readline()`` returning bytes works. Reads block until the printer
    sends a terminator; there is no timeout.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def _read_line(self) -> str:
        try:
            raw = self._stream.readline()
        except ValueError as e:
            # Stream closed by another thread
            raise PrinterConnectionLostError(
                "Connection closed while awaiting response"
            ) from e
        if not raw:
            raise PrinterConnectionLostError(
                "Connection closed by printer while awaiting response"
            )
        return raw.decode(ENCODING, errors="replace").rstrip("\r\n")

    def read_response(self, expected: type | None = None) -> Any:
        """Read lines until the response terminates and decode it.

        Args:
            expected: Optional result type; a decoded result of another
                type raises :class:`UnexpectedResponseError`.

        Returns:
            The decoded result, or ``None`` for a bare acknowledgement.

        Raises:
            PrinterProtocolError: The printer sent an error line.
            PrinterConnectionLostError: The stream ended mid-response.
            UnknownCommandError: The response was for an unknown command.
        """
        envelope = ResponseEnvelope()

        while True:
            line = self._read_line()
            if not line.strip():
                continue

            match = CMD_RECEIVED_RE.search(line)
            if match:
                if envelope.command_id is None:
                    envelope.command_id = match.group("code")
                else:
                    logger.debug(
                        "Ignoring extra start line %r for %s",
                        line, envelope.command_id,
                    )
                continue

            if line in OK_LINES:
                return self._finish(envelope, expected)

            if line.endswith(ERROR_SUFFIX):
                code = parse_error_code(line)
                logger.debug("Printer error line: %r", line)
                raise PrinterProtocolError(code, line)

            envelope.lines.append(line)

    def _finish(self, envelope: ResponseEnvelope, expected: type | None) -> Any:
        if envelope.command_id is None:
            return None

        logger.debug(
            "Response for %s with %d data line(s)",
            envelope.command_id, len(envelope.lines),
        )
        result = decode_response(envelope.command_id, envelope.lines)
        if (
            expected is not None
            and result is not None
            and not isinstance(result, expected)
        ):
            raise UnexpectedResponseError(
                f"Expected {expected.__name__} but {envelope.command_id} "
                f"decoded to {type(result).__name__}"
            )
        return result
