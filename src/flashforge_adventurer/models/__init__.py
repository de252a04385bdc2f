"""Immutable result types decoded from printer responses."""

from .status import Endstop, PrinterStatus
from .temperature import PrinterTemperature
from .firmware import FirmwareInfo
