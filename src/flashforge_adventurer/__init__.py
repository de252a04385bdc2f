"""Client for FlashForge Adventurer printers over the TCP control port."""

from .errors import (
    PrinterError,
    ConnectError,
    PrinterConnectionLostError,
    PrinterProtocolError,
    NotReadyError,
    UnknownCommandError,
    UnexpectedResponseError,
)
from .models import Endstop, PrinterStatus, PrinterTemperature, FirmwareInfo
from .transport.tcp_connection import PrinterConnection, ConnectionState, connect

__version__ = "0.1.0"
