"""Command codes and command-line builders.

Every command is written to the printer as a UTF-8 text line::

    ~<CODE>[ <arg> ...]\r\n

and the printer echoes the code back in its ``CMD <CODE> Received.`` line,
which is how responses are matched to decoders.
"""

from __future__ import annotations

from enum import Enum

from ..errors import UnknownCommandError

COMMAND_PREFIX = "~"
LINE_TERMINATOR = "\r\n"
STORAGE_ROOT = "0:/user/"


class Command(str, Enum):
    """Command codes understood by the printer."""

    QUERY_ENDSTOP = "M119"
    QUERY_TEMPERATURE = "M105"
    BEGIN_STORE = "M28"
    END_STORE = "M29"
    PRINT_FROM_STORAGE = "M23"
    QUERY_FIRMWARE_VERSION = "M115"

    @classmethod
    def from_code(cls, code: str) -> Command:
        """Look up a command by its textual code (e.g. ``"M119"``)."""
        try:
            return cls(code)
        except ValueError:
            raise UnknownCommandError(code) from None


def storage_path(name: str) -> str:
    """Return the printer storage path for a stored file name."""
    if not name:
        raise ValueError("Remote file name must not be empty")
    return f"{STORAGE_ROOT}{name}"


def build_command(command: Command, *args: object) -> bytes:
    """Build the wire bytes for a command with optional arguments."""
    parts = [f"{COMMAND_PREFIX}{command.value}"]
    parts.extend(str(arg) for arg in args)
    return (" ".join(parts) + LINE_TERMINATOR).encode("utf-8")


def build_query_status() -> bytes:
    """Build an M119 endstop/status query."""
    return build_command(Command.QUERY_ENDSTOP)


def build_query_temperature() -> bytes:
    """Build an M105 temperature query."""
    return build_command(Command.QUERY_TEMPERATURE)


def build_query_firmware() -> bytes:
    """Build an M115 firmware/machine info query."""
    return build_command(Command.QUERY_FIRMWARE_VERSION)


def build_begin_store(byte_count: int, name: str) -> bytes:
    """Build an M28 command announcing a file transfer.

    Args:
        byte_count: Total unpadded size of the file in bytes.
        name: File name to store it as on the printer.
    """
    if byte_count < 0:
        raise ValueError(f"Byte count must be non-negative, got {byte_count}")
    return build_command(Command.BEGIN_STORE, byte_count, storage_path(name))


def build_end_store() -> bytes:
    """Build an M29 command closing a file transfer."""
    return build_command(Command.END_STORE)


def build_print_file(name: str) -> bytes:
    """Build an M23 command to print a file already in printer storage."""
    return build_command(Command.PRINT_FROM_STORAGE, storage_path(name))
