"""Exceptions raised by the printer client.

Nothing in the client retries; callers decide whether to reconnect or
give up.
"""

from __future__ import annotations


class PrinterError(Exception):
    """Base class for all printer client errors."""


class ConnectError(PrinterError, ConnectionError):
    """The TCP connection to the printer could not be established."""


class PrinterConnectionLostError(PrinterError, ConnectionError):
    """The printer closed the connection before finishing a response."""


class PrinterProtocolError(PrinterError):
    """The printer answered a command with an error line.

    Attributes:
        code: Error token reported by the printer, or ``""`` when the
            error line did not have the usual ``<code> error.`` shape.
        line: The raw error line.
    """

    def __init__(self, code: str, line: str = "") -> None:
        self.code = code
        self.line = line
        if code:
            message = f"Printer reported error {code!r}"
        else:
            message = f"Printer reported error: {line!r}"
        super().__init__(message)


class NotReadyError(PrinterError, RuntimeError):
    """A command was issued on a connection that is not ready."""


class UnknownCommandError(PrinterError, NotImplementedError):
    """A response arrived for a command code with no known handling."""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Unexpected command: {code}")


class UnexpectedResponseError(PrinterError):
    """A response decoded to a different type than the caller asked for."""
