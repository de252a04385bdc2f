"""Decoders that turn a response's data lines into typed results.

Each decoder receives the lines buffered between the ``CMD <CODE> Received.``
line and the ``ok`` terminator. Decoders never raise on odd input: anything
that cannot be parsed is left as ``None`` on the result.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Iterable

from ..errors import UnknownCommandError
from ..models import Endstop, FirmwareInfo, PrinterStatus, PrinterTemperature
from .commands import Command

logger = logging.getLogger(__name__)

Decoder = Callable[[list[str]], Any]

ENDSTOP_AXES = {"x-max": "x", "y-max": "y", "z-max": "z"}


def _parse_float(text: str) -> float | None:
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def _parse_int(text: str) -> int | None:
    try:
        return int(text)
    except ValueError:
        return None


def _split_key(line: str) -> tuple[str, str] | None:
    """Split ``key: value`` on the first colon, trimming both halves."""
    key, sep, rest = line.partition(":")
    if not sep:
        return None
    return key.strip(), rest.strip()


def parse_endstop(text: str) -> Endstop:
    """Parse the remainder of an ``Endstop:`` line.

    Format: ``X-max:1 Y-max:0 Z-max:0``. Tokens that are malformed or carry
    a non-numeric value are skipped.
    """
    values: dict[str, float] = {}
    for token in text.split():
        parts = token.split(":")
        if len(parts) != 2:
            continue
        axis = ENDSTOP_AXES.get(parts[0].lower())
        value = _parse_float(parts[1])
        if axis is None or value is None:
            continue
        values[axis] = value
    return Endstop(**values)


def decode_status(lines: Iterable[str]) -> PrinterStatus:
    """Decode an M119 response into a :class:`PrinterStatus`."""
    machine_status = None
    move_mode = None
    endstop = Endstop()

    for line in lines:
        split = _split_key(line)
        if split is None:
            continue
        key, value = split
        key = key.lower()
        if key == "machinestatus":
            machine_status = value
        elif key == "movemode":
            move_mode = value
        elif key == "endstop":
            endstop = parse_endstop(value)

    return PrinterStatus(
        machine_status=machine_status,
        move_mode=move_mode,
        endstop=endstop,
    )


def decode_temperature(lines: Iterable[str]) -> PrinterTemperature:
    """Decode an M105 response into a :class:`PrinterTemperature`.

    Example data line: ``T0:220 /230 B:10/55``. The value after ``/`` is the
    target temperature and is ignored; the extruder target sometimes arrives
    as a separate token, which simply matches no key.
    """
    extruder = None
    build_plate = None

    for line in lines:
        for token in line.split():
            key, sep, rest = token.partition(":")
            if not sep:
                continue
            current = _parse_float(rest.split("/")[0])
            if current is None:
                continue
            if key == "T0":
                extruder = current
            elif key == "B":
                build_plate = current

    return PrinterTemperature(extruder=extruder, build_plate=build_plate)


def decode_firmware_info(lines: Iterable[str]) -> FirmwareInfo:
    """Decode an M115 response into a :class:`FirmwareInfo`.

    Example data lines::

        Machine Type: FlashForge Adventurer III
        Machine Name: Adventurer III
        Firmware: v1.3.7
        SN: SNADVA1234567
        X: 150 Y: 150 Z: 150
        Tool Count: 1
        Mac Address:88:A9:A7:90:12:34
    """
    fields: dict[str, Any] = {}
    for line in lines:
        split = _split_key(line)
        if split is None:
            continue
        key, value = split
        key = key.lower().replace(" ", "")
        if key == "machinetype":
            fields["machine_type"] = value
        elif key == "machinename":
            fields["machine_name"] = value
        elif key == "firmware":
            fields["firmware"] = value
        elif key == "sn":
            fields["serial_number"] = value
        elif key == "toolcount":
            fields["tool_count"] = _parse_int(value)
        elif key == "macaddress":
            fields["mac_address"] = value
    return FirmwareInfo(**fields)


# Commands whose responses carry data lines worth decoding.
DECODERS: dict[Command, Decoder] = {
    Command.QUERY_ENDSTOP: decode_status,
    Command.QUERY_TEMPERATURE: decode_temperature,
    Command.QUERY_FIRMWARE_VERSION: decode_firmware_info,
}

# Commands acknowledged with a bare ``ok``.
NO_PAYLOAD_COMMANDS = frozenset({
    Command.BEGIN_STORE,
    Command.END_STORE,
    Command.PRINT_FROM_STORAGE,
})


def decode_response(code: str, lines: list[str]) -> Any:
    """Dispatch buffered data lines to the decoder for *code*.

    Returns:
        The decoded result, or ``None`` for acknowledgement-only commands.

    Raises:
        UnknownCommandError: If *code* has no decoder and is not a known
            acknowledgement-only command.
    """
    command = Command.from_code(code)
    if command in NO_PAYLOAD_COMMANDS:
        if lines:
            logger.debug("Ignoring %d data line(s) for %s", len(lines), code)
        return None
    decoder = DECODERS.get(command)
    if decoder is None:
        raise UnknownCommandError(code)
    return decoder(lines)
