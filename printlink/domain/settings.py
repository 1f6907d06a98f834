"""Typed connectivity settings with validation for persisted payloads."""

from __future__ import annotations

import ipaddress
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class ResolutionPolicy(str, Enum):
    """How a discovery campaign picks among probes that succeeded."""

    DESCENDING = "descending"
    """Highest candidate octet completed by the polling pass wins."""
    FIRST_COMPLETED = "first_completed"
    """Earliest completion time among completed successes wins."""


@dataclass(frozen=True)
class ConnectivitySettings:
    """Runtime configuration for discovery and routed requests."""

    subnet_prefix: str = "192.168.1"
    first_octet: int = 1
    last_octet: int = 254
    port: int = 443
    scan_interval_s: float = 1.0
    probe_timeout_s: Optional[float] = None
    request_timeout_s: float = 10.0
    tick_interval_ms: int = 50
    failure_threshold: int = 3
    resolution: ResolutionPolicy = ResolutionPolicy.DESCENDING
    verify_tls: bool = False
    debug_logging: bool = False

    def __post_init__(self) -> None:
        _validate(self)

    @property
    def effective_probe_timeout_s(self) -> float:
        if self.probe_timeout_s is None:
            return self.scan_interval_s
        return self.probe_timeout_s

    @property
    def candidate_count(self) -> int:
        return self.last_octet - self.first_octet + 1

    def host_for(self, octet: int) -> str:
        return f"{self.subnet_prefix}.{octet}"

    def base_url_for(self, octet: int) -> str:
        host = self.host_for(octet)
        if self.port == 443:
            return f"https://{host}"
        return f"https://{host}:{self.port}"

    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        snapshot = asdict(self)
        snapshot["resolution"] = self.resolution.value
        return snapshot

    def apply_dict(self, payload: Mapping[str, Any]) -> "ConnectivitySettings":
        """Return a copy with ``payload`` applied.

        Raises:
            ValueError: On unknown keys or values that fail coercion/validation.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")
        known = {f.name for f in fields(self)}
        unknown = set(payload.keys()) - known
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")
        updates = {key: _coerce(key, value) for key, value in payload.items()}
        return replace(self, **updates)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ConnectivitySettings":
        return cls().apply_dict(payload)


def _coerce(key: str, value: Any) -> Any:
    if key in ("first_octet", "last_octet", "port", "tick_interval_ms", "failure_threshold"):
        return _coerce_int(key, value)
    if key in ("scan_interval_s", "request_timeout_s"):
        return _coerce_float(key, value)
    if key == "probe_timeout_s":
        return None if value is None else _coerce_float(key, value)
    if key in ("verify_tls", "debug_logging"):
        return _coerce_bool(key, value)
    if key == "resolution":
        try:
            return ResolutionPolicy(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"resolution must be one of: {', '.join(p.value for p in ResolutionPolicy)}") from None
    if key == "subnet_prefix":
        if not isinstance(value, str):
            raise ValueError("subnet_prefix must be a string.")
        return value.strip().rstrip(".")
    return value


def _coerce_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be an integer.") from None


def _coerce_float(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number.")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a number.") from None


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in {"1", "true", "yes", "on"}:
            return True
        if text in {"0", "false", "no", "off", ""}:
            return False
    if isinstance(value, int):
        return bool(value)
    raise ValueError(f"{key} must be a boolean.")


def _validate(cfg: ConnectivitySettings) -> None:
    parts = cfg.subnet_prefix.split(".")
    if len(parts) != 3:
        raise ValueError("subnet_prefix must have three octets, e.g. '192.168.1'.")
    try:
        ipaddress.IPv4Address(f"{cfg.subnet_prefix}.0")
    except ValueError:
        raise ValueError(f"subnet_prefix '{cfg.subnet_prefix}' is not a valid IPv4 prefix.") from None
    if not 0 <= cfg.first_octet <= cfg.last_octet <= 255:
        raise ValueError("Candidate range must satisfy 0 <= first_octet <= last_octet <= 255.")
    if not 0 < cfg.port < 65536:
        raise ValueError("port must be in 1..65535.")
    if cfg.scan_interval_s <= 0:
        raise ValueError("scan_interval_s must be positive.")
    if cfg.probe_timeout_s is not None and cfg.probe_timeout_s <= 0:
        raise ValueError("probe_timeout_s must be positive.")
    if cfg.request_timeout_s <= 0:
        raise ValueError("request_timeout_s must be positive.")
    if cfg.tick_interval_ms < 1:
        raise ValueError("tick_interval_ms must be at least 1.")
    if cfg.failure_threshold < 1:
        raise ValueError("failure_threshold must be at least 1.")
    if not isinstance(cfg.resolution, ResolutionPolicy):
        raise ValueError("resolution must be a ResolutionPolicy.")


__all__ = ["ConnectivitySettings", "ResolutionPolicy"]
