"""Printer status model (M119 response)."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Endstop:
    """Endstop readings per axis; ``None`` means the axis was not reported."""

    x: float | None = None
    y: float | None = None
    z: float | None = None

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(frozen=True)
class PrinterStatus:
    """Machine state reported by the printer.

    Example response this is built from::

        CMD M119 Received.
        Endstop: X-max:1 Y-max:0 Z-max:0
        MachineStatus: READY
        MoveMode: READY
        Status: S:0 L:0 J:0 F:0
        ok
    """

    machine_status: str | None = None
    move_mode: str | None = None
    endstop: Endstop = field(default_factory=Endstop)

    def to_dict(self) -> dict:
        return {
            "machine_status": self.machine_status,
            "move_mode": self.move_mode,
            "endstop": self.endstop.to_dict(),
        }
