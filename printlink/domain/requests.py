"""Semantic request kinds and their wire paths on the printer's HTTP API.

The catalog is a static table: every ``RequestKind`` member maps to exactly
one relative path and one default HTTP verb. The table is checked against the
enum when this module is imported, so a member added without a mapping fails
immediately instead of at request time.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping


class RequestKind(Enum):
    """Named operations understood by the printer firmware."""

    LIST_FILES = "list_files"
    DELETE_FILE = "delete_file"
    PRINT_FILE = "print_file"
    SEND_FILE = "send_file"
    PRINT_STATUS = "print_status"
    PAUSE_OR_RESUME = "pause_or_resume"
    PRINTER_STATE = "printer_state"
    MOVE = "move"
    LIST_GCODE_COMMANDS_IN_MEMORY = "list_gcode_commands_in_memory"
    SEND_GCODE_COMMANDS = "send_gcode_commands"


_PATHS: Mapping[RequestKind, str] = {
    RequestKind.LIST_FILES: "list-files",
    RequestKind.DELETE_FILE: "delete-file",
    RequestKind.PRINT_FILE: "print-file",
    RequestKind.SEND_FILE: "send-file",
    RequestKind.PRINT_STATUS: "print-status",
    RequestKind.PAUSE_OR_RESUME: "pause-or-resume",
    RequestKind.PRINTER_STATE: "printer-state",
    RequestKind.MOVE: "move",
    RequestKind.LIST_GCODE_COMMANDS_IN_MEMORY: "list-gcode-commands-in-memory",
    RequestKind.SEND_GCODE_COMMANDS: "send-gcode-commands",
}

# Verbs the firmware binds to each path.
_METHODS: Mapping[RequestKind, str] = {
    RequestKind.LIST_FILES: "GET",
    RequestKind.DELETE_FILE: "DELETE",
    RequestKind.PRINT_FILE: "POST",
    RequestKind.SEND_FILE: "POST",
    RequestKind.PRINT_STATUS: "GET",
    RequestKind.PAUSE_OR_RESUME: "POST",
    RequestKind.PRINTER_STATE: "GET",
    RequestKind.MOVE: "POST",
    RequestKind.LIST_GCODE_COMMANDS_IN_MEMORY: "GET",
    RequestKind.SEND_GCODE_COMMANDS: "POST",
}


def _check_exhaustive(table: Mapping[RequestKind, str], label: str) -> Dict[RequestKind, str]:
    missing = [kind.name for kind in RequestKind if not table.get(kind)]
    if missing:
        raise RuntimeError(f"{label} has no entry for: {', '.join(missing)}")
    return dict(table)


_PATHS = _check_exhaustive(_PATHS, "request path table")
_METHODS = _check_exhaustive(_METHODS, "request method table")


def path_for(kind: RequestKind) -> str:
    """Return the relative URI path (no leading slash) for ``kind``.

    Raises:
        TypeError: If ``kind`` is not a ``RequestKind``.
    """
    if not isinstance(kind, RequestKind):
        raise TypeError(f"expected RequestKind, got {type(kind).__name__}")
    return _PATHS[kind]


def default_method(kind: RequestKind) -> str:
    """Return the HTTP verb the firmware expects for ``kind``."""
    if not isinstance(kind, RequestKind):
        raise TypeError(f"expected RequestKind, got {type(kind).__name__}")
    return _METHODS[kind]


__all__ = ["RequestKind", "default_method", "path_for"]
