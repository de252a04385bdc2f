"""Printer temperature model (M105 response)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PrinterTemperature:
    """Current extruder and build plate temperatures in degrees Celsius.

    Either value is ``None`` if the printer did not report it.
    """

    extruder: float | None = None
    build_plate: float | None = None

    def to_dict(self) -> dict:
        return {"extruder": self.extruder, "build_plate": self.build_plate}
