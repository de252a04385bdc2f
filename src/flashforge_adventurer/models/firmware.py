"""Machine identification model (M115 response)."""

from __future__ import annotations

from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class FirmwareInfo:
    """Machine type, name and firmware version reported by the printer."""

    machine_type: str | None = None
    machine_name: str | None = None
    firmware: str | None = None
    serial_number: str | None = None
    tool_count: int | None = None
    mac_address: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)
