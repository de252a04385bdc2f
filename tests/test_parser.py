"""Tests for the line-oriented response parser."""

import io

import pytest

from flashforge_adventurer.errors import (
    PrinterConnectionLostError,
    PrinterProtocolError,
    UnexpectedResponseError,
    UnknownCommandError,
)
from flashforge_adventurer.models import Endstop, PrinterStatus, PrinterTemperature
from flashforge_adventurer.protocol.parser import ResponseReader, parse_error_code


def _reader(text: str) -> ResponseReader:
    return ResponseReader(io.BytesIO(text.encode("utf-8")))


def test_status_response():
    reader = _reader("CMD M119 Received.\nMachineStatus: READY\nMoveMode: READY\nok\n")
    status = reader.read_response(PrinterStatus)
    assert status == PrinterStatus(
        machine_status="READY", move_mode="READY", endstop=Endstop()
    )


def test_temperature_response():
    reader = _reader("CMD M105 Received.\nT0:220 /230 B:10/55\nok\n")
    temp = reader.read_response(PrinterTemperature)
    assert temp.extruder == 220.0
    assert temp.build_plate == 10.0


def test_crlf_and_blank_lines():
    reader = _reader("\r\n  \r\nCMD M105 Received.\r\n\r\nT0:30/0 B:20/0\r\nok.\r\n")
    temp = reader.read_response()
    assert temp == PrinterTemperature(extruder=30.0, build_plate=20.0)


def test_error_line_with_code():
    reader = _reader("E1 error.\n")
    with pytest.raises(PrinterProtocolError) as excinfo:
        reader.read_response()
    assert excinfo.value.code == "E1"


def test_error_line_discards_buffered_data():
    reader = _reader("CMD M23 Received.\nFile opened: x\nE404 error.\n")
    with pytest.raises(PrinterProtocolError) as excinfo:
        reader.read_response()
    assert excinfo.value.code == "E404"
    assert excinfo.value.line == "E404 error."


def test_error_line_unexpected_shape_has_empty_code():
    reader = _reader("open file failed error.\n")
    with pytest.raises(PrinterProtocolError) as excinfo:
        reader.read_response()
    assert excinfo.value.code == ""


def test_parse_error_code():
    assert parse_error_code("E1 error.") == "E1"
    assert parse_error_code("error.") == ""
    assert parse_error_code("a b error.") == ""


def test_ok_without_start_line_is_none():
    assert _reader("ok\n").read_response(PrinterStatus) is None


def test_ok_must_match_exactly():
    reader = _reader("CMD M119 Received.\nOK\nMachineStatus: READY\nok\n")
    status = reader.read_response()
    assert status.machine_status == "READY"


def test_ack_only_command_returns_none():
    reader = _reader("CMD M28 Received.\nWriting to file: 0:/user/a.g\nok\n")
    assert reader.read_response() is None


def test_second_start_line_is_ignored():
    reader = _reader(
        "CMD M119 Received.\nCMD M105 Received.\nMachineStatus: READY\nok\n"
    )
    status = reader.read_response()
    assert isinstance(status, PrinterStatus)
    assert status.machine_status == "READY"


def test_unknown_command_is_fatal():
    reader = _reader("CMD M999 Received.\nok\n")
    with pytest.raises(UnknownCommandError):
        reader.read_response()


def test_unexpected_result_type():
    reader = _reader("CMD M105 Received.\nT0:1 B:2\nok\n")
    with pytest.raises(UnexpectedResponseError):
        reader.read_response(PrinterStatus)


def test_end_of_stream_before_terminator():
    reader = _reader("CMD M119 Received.\nMachineStatus: READY\n")
    with pytest.raises(PrinterConnectionLostError):
        reader.read_response()


def test_consecutive_responses_do_not_share_state():
    reader = _reader(
        "CMD M119 Received.\nMachineStatus: READY\nok\n"
        "ok\n"
        "CMD M105 Received.\nT0:200/200 B:60/60\nok\n"
    )
    assert reader.read_response().machine_status == "READY"
    assert reader.read_response() is None
    assert reader.read_response().extruder == 200.0


def test_closed_stream_is_connection_lost():
    stream = io.BytesIO(b"CMD M119 Received.\n")
    reader = ResponseReader(stream)
    stream.close()
    with pytest.raises(PrinterConnectionLostError):
        reader.read_response()
