"""Domain package exports for request kinds, ports, errors and wire models."""

from .errors import (
    DecodeError,
    TransportError,
    TransportNetworkError,
    TransportTimeout,
    TransportUnreachable,
    UseCaseError,
)
from .models import (
    FileId,
    FileListing,
    GCodeWindow,
    MoveRequest,
    PrintStatus,
    PrinterStateSnapshot,
    SendGCodeRequest,
    StoredFile,
)
from .ports import Transport, TransportResponse
from .requests import RequestKind, default_method, path_for
from .settings import ConnectivitySettings, ResolutionPolicy

__all__ = [
    "ConnectivitySettings",
    "DecodeError",
    "FileId",
    "FileListing",
    "GCodeWindow",
    "MoveRequest",
    "PrintStatus",
    "PrinterStateSnapshot",
    "RequestKind",
    "ResolutionPolicy",
    "SendGCodeRequest",
    "StoredFile",
    "Transport",
    "TransportError",
    "TransportNetworkError",
    "TransportResponse",
    "TransportTimeout",
    "TransportUnreachable",
    "UseCaseError",
    "default_method",
    "path_for",
]
