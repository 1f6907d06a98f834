"""Domain-level error types shared by adapters, use cases and the CLI.

Transport errors never carry ``requests`` exception types across the adapter
boundary; adapters translate them into the classes below.
"""

from __future__ import annotations

from typing import Optional


class TransportError(RuntimeError):
    """Base class for failures while talking to the printer."""

    def __init__(self, message: str, *, context: Optional[str] = None) -> None:
        super().__init__(message)
        self.context = context


class TransportUnreachable(TransportError):
    """No transport is currently locked onto the printer."""


class TransportTimeout(TransportError):
    """A probe or request exceeded its deadline."""


class TransportNetworkError(TransportError):
    """I/O level failure such as connection refused or reset."""


class DecodeError(TransportError):
    """Response body did not match the expected JSON shape."""


class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def map_transport_error(exc: Exception, *, default_code: str = "UNEXPECTED_ERROR") -> UseCaseError:
    """Map transport exceptions to stable ``UseCaseError`` codes."""
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, TransportUnreachable):
        return UseCaseError("DEVICE_UNREACHABLE", "Printer not found on the network.")
    if isinstance(exc, TransportTimeout):
        return UseCaseError("REQUEST_TIMEOUT", "Request timed out. Check connection.")
    if isinstance(exc, TransportNetworkError):
        return UseCaseError("NETWORK_ERROR", str(exc) or "Network error.")
    if isinstance(exc, DecodeError):
        return UseCaseError("INVALID_RESPONSE", str(exc) or "Unexpected response from printer.")
    return UseCaseError(default_code, str(exc) or "Unexpected error.")


__all__ = [
    "DecodeError",
    "TransportError",
    "TransportNetworkError",
    "TransportTimeout",
    "TransportUnreachable",
    "UseCaseError",
    "map_transport_error",
]
