"""Wire models for the printer's JSON request and response bodies.

Keys match the firmware's field names exactly; ``from_dict`` validates shape
and raises ``DecodeError`` so a malformed body never reaches the caller as a
half-populated object.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple

from .errors import DecodeError

_UINT32_MAX = 0xFFFFFFFF
_LINE_SPLIT = re.compile(r"\r\n|\r|\n")


def _mapping(data: Any, ctx: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise DecodeError(f"{ctx}: expected object, got {type(data).__name__}")
    return data


def _field(data: Mapping[str, Any], key: str, ctx: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise DecodeError(f"{ctx}: missing field '{key}'") from None


def _int(data: Mapping[str, Any], key: str, ctx: str) -> int:
    value = _field(data, key, ctx)
    # bool is an int subclass; the firmware never sends booleans for counters
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"{ctx}: field '{key}' must be a number")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise DecodeError(f"{ctx}: field '{key}' must be finite")
        return int(round(value))
    return value


def _str(data: Mapping[str, Any], key: str, ctx: str) -> str:
    value = _field(data, key, ctx)
    if not isinstance(value, str):
        raise DecodeError(f"{ctx}: field '{key}' must be a string")
    return value


def _bool(data: Mapping[str, Any], key: str, ctx: str) -> bool:
    value = _field(data, key, ctx)
    if not isinstance(value, bool):
        raise DecodeError(f"{ctx}: field '{key}' must be a boolean")
    return value


@dataclass(frozen=True)
class FileId:
    """Identifier of a file stored on the printer's flash."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError("FileId must be an integer.")
        if not 0 <= self.value <= _UINT32_MAX:
            raise ValueError("FileId must fit in an unsigned 32-bit integer.")

    @classmethod
    def from_dict(cls, data: Any) -> "FileId":
        payload = _mapping(data, "file_id")
        try:
            return cls(_int(payload, "FileID", "file_id"))
        except ValueError as exc:
            raise DecodeError(f"file_id: {exc}") from exc

    def to_dict(self) -> Dict[str, int]:
        return {"FileID": self.value}

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StoredFile:
    name: str
    size_in_bytes: int
    id: FileId

    @classmethod
    def from_dict(cls, data: Any) -> "StoredFile":
        payload = _mapping(data, "file")
        size = _int(payload, "SizeInBytes", "file")
        if size < 0:
            raise DecodeError("file: field 'SizeInBytes' must not be negative")
        return cls(
            name=_str(payload, "Name", "file"),
            size_in_bytes=size,
            id=FileId.from_dict(_field(payload, "ID", "file")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"Name": self.name, "SizeInBytes": self.size_in_bytes, "ID": self.id.to_dict()}


@dataclass(frozen=True)
class FileListing:
    files: Tuple[StoredFile, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "FileListing":
        payload = _mapping(data, "file_listing")
        raw = _field(payload, "Files", "file_listing")
        if not isinstance(raw, list):
            raise DecodeError("file_listing: field 'Files' must be a list")
        return cls(files=tuple(StoredFile.from_dict(entry) for entry in raw))

    def to_dict(self) -> Dict[str, Any]:
        return {"Files": [entry.to_dict() for entry in self.files]}

    def __len__(self) -> int:
        return len(self.files)


@dataclass(frozen=True)
class PrintStatus:
    is_printing: bool
    file_name_being_printed: str
    print_duration_in_seconds: int
    time_printed_in_seconds: int
    is_paused: bool

    @classmethod
    def from_dict(cls, data: Any) -> "PrintStatus":
        payload = _mapping(data, "print_status")
        ctx = "print_status"
        return cls(
            is_printing=_bool(payload, "isPrinting", ctx),
            file_name_being_printed=_str(payload, "fileNameBeingPrinted", ctx),
            print_duration_in_seconds=_int(payload, "printDurationInSeconds", ctx),
            time_printed_in_seconds=_int(payload, "timePrintedInSeconds", ctx),
            is_paused=_bool(payload, "isPaused", ctx),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isPrinting": self.is_printing,
            "fileNameBeingPrinted": self.file_name_being_printed,
            "printDurationInSeconds": self.print_duration_in_seconds,
            "timePrintedInSeconds": self.time_printed_in_seconds,
            "isPaused": self.is_paused,
        }

    @property
    def remaining_seconds(self) -> int:
        return max(0, self.print_duration_in_seconds - self.time_printed_in_seconds)

    @property
    def progress_pct(self) -> int:
        if self.print_duration_in_seconds <= 0:
            return 0
        pct = 100 * self.time_printed_in_seconds // self.print_duration_in_seconds
        return max(0, min(100, pct))


@dataclass(frozen=True)
class PrinterStateSnapshot:
    """Temperatures reported by the firmware; ``-1`` means not sampled yet."""

    hotend_current_temperature: int
    hotend_target_temperature: int
    bed_current_temperature: int
    bed_target_temperature: int

    @classmethod
    def from_dict(cls, data: Any) -> "PrinterStateSnapshot":
        payload = _mapping(data, "printer_state")
        ctx = "printer_state"
        return cls(
            hotend_current_temperature=_int(payload, "hotendCurrentTemperature", ctx),
            hotend_target_temperature=_int(payload, "hotendTargetTemperature", ctx),
            bed_current_temperature=_int(payload, "bedCurrentTemperature", ctx),
            bed_target_temperature=_int(payload, "bedTargetTemperature", ctx),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "hotendCurrentTemperature": self.hotend_current_temperature,
            "hotendTargetTemperature": self.hotend_target_temperature,
            "bedCurrentTemperature": self.bed_current_temperature,
            "bedTargetTemperature": self.bed_target_temperature,
        }


@dataclass(frozen=True)
class GCodeWindow:
    """Slice of the firmware's in-memory G-code history."""

    line_of_first_command: int
    commands: str

    @classmethod
    def from_dict(cls, data: Any) -> "GCodeWindow":
        payload = _mapping(data, "gcode_window")
        return cls(
            line_of_first_command=_int(payload, "lineOfFirstCommand", "gcode_window"),
            commands=_str(payload, "commands", "gcode_window"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"lineOfFirstCommand": self.line_of_first_command, "commands": self.commands}

    def lines(self) -> List[str]:
        if not self.commands:
            return []
        parts = _LINE_SPLIT.split(self.commands)
        # a trailing newline terminates the last line, it does not start a new one
        if parts[-1] == "":
            parts.pop()
        return parts

    def next_line(self) -> int:
        """Line number to request next so already-seen lines are skipped."""
        return self.line_of_first_command + len(self.lines())


@dataclass(frozen=True)
class SendGCodeRequest:
    commands: str

    def to_dict(self) -> Dict[str, str]:
        return {"commands": self.commands}


AXES: Tuple[str, ...] = ("X", "Y", "Z")


@dataclass(frozen=True)
class MoveRequest:
    axis: str
    direction: float

    def __post_init__(self) -> None:
        if self.axis not in AXES:
            raise ValueError(f"axis must be one of {', '.join(AXES)}")
        if not math.isfinite(self.direction):
            raise ValueError("direction must be a finite number")

    def to_dict(self) -> Dict[str, Any]:
        return {"axis": self.axis, "direction": self.direction}


__all__ = [
    "AXES",
    "FileId",
    "FileListing",
    "GCodeWindow",
    "MoveRequest",
    "PrintStatus",
    "PrinterStateSnapshot",
    "SendGCodeRequest",
    "StoredFile",
]
