"""Tests for per-command response decoders."""

import pytest

from flashforge_adventurer.errors import UnknownCommandError
from flashforge_adventurer.models import Endstop, FirmwareInfo, PrinterStatus, PrinterTemperature
from flashforge_adventurer.protocol.decoders import (
    decode_firmware_info,
    decode_response,
    decode_status,
    decode_temperature,
    parse_endstop,
)


# ─── STATUS ──────────────────────────────────────────────────────────

def test_decode_status_full():
    status = decode_status([
        "Endstop: X-max:1 Y-max:0 Z-max:0",
        "MachineStatus: READY",
        "MoveMode: MOVING",
        "Status: S:0 L:0 J:0 F:0",
    ])
    assert status.machine_status == "READY"
    assert status.move_mode == "MOVING"
    assert status.endstop == Endstop(x=1.0, y=0.0, z=0.0)


def test_decode_status_missing_fields_are_unknown():
    status = decode_status(["MachineStatus: BUILDING_FROM_SD"])
    assert status.machine_status == "BUILDING_FROM_SD"
    assert status.move_mode is None
    assert status.endstop == Endstop()


def test_decode_status_keys_case_insensitive():
    status = decode_status(["machinestatus :  PAUSED ", "MOVEMODE:READY"])
    assert status.machine_status == "PAUSED"
    assert status.move_mode == "READY"


def test_decode_status_ignores_unknown_and_malformed_lines():
    status = decode_status(["garbage", "LED: 1", "", ":"])
    assert status == PrinterStatus()


def test_decode_status_value_keeps_later_colons():
    status = decode_status(["MachineStatus: A:B"])
    assert status.machine_status == "A:B"


def test_parse_endstop_skips_bad_tokens():
    endstop = parse_endstop("X-max:1 Y-max:abc Z-max Q-max:1 z-MAX:0")
    assert endstop.x == 1.0
    assert endstop.y is None
    assert endstop.z == 0.0


def test_parse_endstop_empty():
    assert parse_endstop("") == Endstop()


def test_status_to_dict():
    status = decode_status(["MachineStatus: READY"])
    assert status.to_dict() == {
        "machine_status": "READY",
        "move_mode": None,
        "endstop": {"x": None, "y": None, "z": None},
    }


# ─── TEMPERATURE ─────────────────────────────────────────────────────

def test_decode_temperature_ignores_targets():
    temp = decode_temperature(["T0:220 /230 B:10/55"])
    assert temp.extruder == 220.0
    assert temp.build_plate == 10.0


def test_decode_temperature_without_target():
    temp = decode_temperature(["T0:25 B:24"])
    assert temp == PrinterTemperature(extruder=25.0, build_plate=24.0)


def test_decode_temperature_keys_case_sensitive():
    temp = decode_temperature(["t0:100/0 b:50/0"])
    assert temp == PrinterTemperature()


def test_decode_temperature_parse_failure_leaves_unknown():
    temp = decode_temperature(["T0:hot/230 B:60.5/60"])
    assert temp.extruder is None
    assert temp.build_plate == 60.5


def test_decode_temperature_rejects_nan():
    temp = decode_temperature(["T0:nan/0 B:inf/0"])
    assert temp == PrinterTemperature()


def test_decode_temperature_empty():
    assert decode_temperature([]) == PrinterTemperature()


# ─── FIRMWARE ────────────────────────────────────────────────────────

def test_decode_firmware_info():
    info = decode_firmware_info([
        "Machine Type: FlashForge Adventurer III",
        "Machine Name: Adventurer III",
        "Firmware: v1.3.7",
        "SN: SNADVA1234567",
        "X: 150 Y: 150 Z: 150",
        "Tool Count: 1",
        "Mac Address:88:A9:A7:90:12:34",
    ])
    assert info == FirmwareInfo(
        machine_type="FlashForge Adventurer III",
        machine_name="Adventurer III",
        firmware="v1.3.7",
        serial_number="SNADVA1234567",
        tool_count=1,
        mac_address="88:A9:A7:90:12:34",
    )


def test_decode_firmware_info_bad_tool_count():
    info = decode_firmware_info(["Tool Count: two"])
    assert info.tool_count is None


# ─── DISPATCH ────────────────────────────────────────────────────────

def test_decode_response_dispatches_by_code():
    assert isinstance(decode_response("M119", []), PrinterStatus)
    assert isinstance(decode_response("M105", []), PrinterTemperature)
    assert isinstance(decode_response("M115", []), FirmwareInfo)


@pytest.mark.parametrize("code", ["M28", "M29", "M23"])
def test_decode_response_ack_only(code):
    assert decode_response(code, ["Writing to file: 0:/user/a.g"]) is None


def test_decode_response_unknown_code():
    with pytest.raises(UnknownCommandError):
        decode_response("G28", [])
