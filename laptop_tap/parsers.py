"""Text parsers for the output of the probe commands.

Every parser is a pure function: raw command output in, reading out. A line
that does not match leaves the documented zero default in place; parsers
never raise on malformed input.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
import math
import re
from typing import Any

PACKAGE_RE = re.compile(r"^Package id 0:\s+\+([\d.]+)")
CORE_RE = re.compile(r"^Core (\d+):\s+\+([\d.]+)")
FAN_RE = re.compile(r"^fan(\d+):\s+([\d.]+)")
UVCVIDEO_RE = re.compile(r"^uvcvideo\s+\d+\s+(\d+)", re.MULTILINE)
MEMORY_RE = re.compile(
    r"^Mem:\s+(?P<total>\d+)\s+(?P<used>\d+)\s+(?P<free>\d+)"
    r"\s+(?P<shared>\d+)\s+(?P<cache>\d+)",
    re.MULTILINE,
)
DISK_RE = re.compile(r"^\s*(?P<used>\d+)\s+(?P<free>\d+)", re.MULTILINE)
UPTIME_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)")

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR
MS_PER_MONTH = 30 * MS_PER_DAY
MS_PER_YEAR = 365 * MS_PER_DAY


def _to_number(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        return 0.0


def _set_indexed(values: list[float], index: int, value: float) -> None:
    if index < 0:
        return
    if index >= len(values):
        values.extend([0.0] * (index + 1 - len(values)))
    values[index] = value


@dataclass
class CpuReading:
    temp: float = 0.0
    core_temps: list[float] = field(default_factory=list)
    fan_speeds: list[float] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "temp": self.temp,
            "coreTemps": list(self.core_temps),
            "fanSpeeds": list(self.fan_speeds),
        }

    def attributes(self) -> dict[str, float]:
        attrs: dict[str, float] = {}
        for index, temp in enumerate(self.core_temps):
            attrs[f"core_{index}_temperature"] = temp
        for index, speed in enumerate(self.fan_speeds):
            attrs[f"fan_{index}_speed"] = speed
        return attrs


@dataclass
class CameraReading:
    active: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {"active": self.active}


@dataclass
class MicrophoneReading:
    active: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {"active": self.active}


@dataclass
class MemoryReading:
    total: int = 0
    used: int = 0
    free: int = 0
    shared: int = 0
    cache: int = 0

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DiskReading:
    total: int = 0
    used: int = 0
    free: int = 0

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class UptimeReading:
    seconds: float = 0.0
    milliseconds: int = 0
    attributes: dict[str, int] = field(default_factory=dict)


def parse_sensors(text: str) -> CpuReading:
    """Parse ``sensors -f`` output into package, per-core and per-fan values.

    Fan labels are 1-based in the output and stored 0-based.
    """
    reading = CpuReading()
    for line in text.splitlines():
        if match := PACKAGE_RE.match(line):
            reading.temp = _to_number(match.group(1))
        elif match := CORE_RE.match(line):
            _set_indexed(
                reading.core_temps, int(match.group(1)), _to_number(match.group(2))
            )
        elif match := FAN_RE.match(line):
            _set_indexed(
                reading.fan_speeds, int(match.group(1)) - 1, _to_number(match.group(2))
            )
    return reading


def parse_lsmod(text: str) -> CameraReading:
    """The camera is active while the uvcvideo module has a non-zero use count."""
    match = UVCVIDEO_RE.search(text)
    if match is None:
        return CameraReading(active=False)
    return CameraReading(active=int(match.group(1)) > 0)


def parse_microphone(text: str) -> MicrophoneReading:
    return MicrophoneReading(active=len(text) > 0)


def parse_free(text: str) -> MemoryReading:
    match = MEMORY_RE.search(text)
    if match is None:
        return MemoryReading()
    return MemoryReading(**{key: int(value) for key, value in match.groupdict().items()})


def parse_df(text: str) -> DiskReading:
    # The header line ("Used Avail") never matches the numeric pattern.
    match = DISK_RE.search(text)
    if match is None:
        return DiskReading()
    used = int(match.group("used"))
    free = int(match.group("free"))
    return DiskReading(total=used + free, used=used, free=free)


def split_duration(milliseconds: int) -> dict[str, int]:
    """Break a duration into calendar-like parts (365-day years, 30-day months)."""
    parts: dict[str, int] = {}
    remaining = max(0, milliseconds)
    for name, size in (
        ("years", MS_PER_YEAR),
        ("months", MS_PER_MONTH),
        ("days", MS_PER_DAY),
        ("hours", MS_PER_HOUR),
        ("minutes", MS_PER_MINUTE),
        ("seconds", MS_PER_SECOND),
    ):
        parts[name], remaining = divmod(remaining, size)
    parts["milliseconds"] = remaining
    return parts


def parse_uptime(text: str) -> UptimeReading:
    """Parse ``/proc/uptime``; only the first field (seconds since boot) is used."""
    match = UPTIME_RE.match(text)
    if match is None:
        return UptimeReading(attributes=split_duration(0))
    raw = match.group(1)
    # Decimal keeps 12345.67 s at exactly 12345670 ms.
    milliseconds = math.floor(Decimal(raw) * MS_PER_SECOND)
    return UptimeReading(
        seconds=float(raw),
        milliseconds=milliseconds,
        attributes=split_duration(milliseconds),
    )
