from __future__ import annotations

import json
from concurrent.futures import Future
from typing import Any, Mapping, Optional

from printlink.domain.models import FileId
from printlink.domain.ports import TransportResponse
from printlink.domain.errors import UseCaseError
from printlink.utils.futures import map_future


def encode_json(payload: Mapping[str, Any]) -> bytes:
    """Serialize a request body the way the firmware's JSON parser expects."""
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def coerce_file_id(value: Any) -> FileId:
    if isinstance(value, FileId):
        return value
    try:
        return FileId(int(value))
    except (TypeError, ValueError) as exc:
        raise UseCaseError("INVALID_FILE_ID", f"Invalid file id {value!r}: {exc}") from None


def acknowledged(source: "Future[Optional[TransportResponse]]") -> "Future[Optional[bool]]":
    """Collapse a routed response into ``None`` (unreachable) or 2xx yes/no."""
    return map_future(source, lambda resp: None if resp is None else resp.ok)


__all__ = ["acknowledged", "coerce_file_id", "encode_json"]
