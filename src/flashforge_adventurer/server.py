"""MCP server entry point for FlashForge Adventurer printers.

Exposes the printer's status, temperature and file-transfer commands as
tools via the Model Context Protocol, using the official Python MCP SDK
with stdio transport.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from .errors import PrinterError, PrinterProtocolError
from .transport.tcp_connection import (
    DEFAULT_PORT,
    PrinterConnection,
    remote_name_for,
)

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "flashforge-adventurer",
    instructions="Tools for monitoring and printing on FlashForge Adventurer 3D printers.",
)

# Global connection state
_connection: PrinterConnection | None = None


def _get_connection() -> PrinterConnection:
    """Get the active printer connection, raising if not connected."""
    if _connection is None or not _connection.connected:
        raise RuntimeError(
            "Not connected to printer. Use the 'connect' tool first."
        )
    return _connection


def _error(e: PrinterError) -> dict[str, Any]:
    result: dict[str, Any] = {"error": str(e)}
    if isinstance(e, PrinterProtocolError):
        result["code"] = e.code
    return result


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(host: str, port: int = DEFAULT_PORT) -> dict[str, Any]:
    """Open a TCP connection to the printer.

    The printer is polled for its status as part of connecting, because it
    ignores other commands until it has been polled once.

    Args:
        host: Printer IP address or hostname.
        port: Control port (default 8899).
    """
    global _connection
    if _connection is not None and _connection.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "host": _connection.host,
        }

    connection = PrinterConnection(host, port)
    try:
        status = connection.connect()
    except PrinterError as e:
        return _error(e)

    _connection = connection
    result: dict[str, Any] = {"connected": True, "host": host, "port": port}
    if status is not None:
        result["status"] = status.to_dict()
    return result


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the connection to the printer."""
    global _connection
    if _connection is None:
        return {"disconnected": True}
    _connection.close()
    _connection = None
    return {"disconnected": True}


# ─── QUERY TOOLS ──────────────────────────────────────────────────────

@mcp.tool()
def get_status() -> dict[str, Any]:
    """Read machine status, move mode and endstop states (M119)."""
    conn = _get_connection()
    try:
        status = conn.query_status()
    except PrinterError as e:
        return _error(e)
    if status is None:
        return {"error": "Printer returned no status"}
    return status.to_dict()


@mcp.tool()
def get_temperature() -> dict[str, Any]:
    """Read current extruder and build plate temperatures (M105)."""
    conn = _get_connection()
    try:
        temperature = conn.query_temperature()
    except PrinterError as e:
        return _error(e)
    if temperature is None:
        return {"error": "Printer returned no temperatures"}
    return temperature.to_dict()


@mcp.tool()
def get_firmware_info() -> dict[str, Any]:
    """Read machine type, name and firmware version (M115)."""
    conn = _get_connection()
    try:
        info = conn.query_firmware_info()
    except PrinterError as e:
        return _error(e)
    if info is None:
        return {"error": "Printer returned no machine info"}
    return info.to_dict()


# ─── FILE TOOLS ───────────────────────────────────────────────────────

@mcp.tool()
def upload_file(local_path: str, remote_name: str | None = None) -> dict[str, Any]:
    """Upload a G-code file to the printer's storage.

    Args:
        local_path: Path to the file on this machine.
        remote_name: Name to store it as. Defaults to the local file name
                     with a ``.g`` extension.
    """
    path = Path(local_path)
    if not path.is_file():
        return {"error": f"File not found: {local_path}"}

    name = remote_name or remote_name_for(path)
    conn = _get_connection()
    try:
        conn.store_file(path, name)
    except PrinterError as e:
        return _error(e)
    except OSError as e:
        return {"error": f"Could not read {local_path}: {e}"}
    return {"stored": True, "remote_name": name, "size": path.stat().st_size}


@mcp.tool()
def print_file(remote_name: str) -> dict[str, Any]:
    """Start printing a file already stored on the printer.

    Args:
        remote_name: Stored file name, including extension.
    """
    conn = _get_connection()
    try:
        conn.print_file(remote_name)
    except PrinterError as e:
        return _error(e)
    return {"printing": True, "remote_name": remote_name}


@mcp.tool()
def upload_and_print(local_path: str) -> dict[str, Any]:
    """Upload a G-code file and start printing it.

    The file is stored under its local name with a ``.g`` extension.

    Args:
        local_path: Path to the file on this machine.
    """
    result = upload_file(local_path)
    if "error" in result:
        return result
    printed = print_file(result["remote_name"])
    if "error" in printed:
        return printed
    return {**result, "printing": True}


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
