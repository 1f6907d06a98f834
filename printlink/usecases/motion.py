from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from typing import Optional

from printlink.adapters.transport_router import TransportRouter
from printlink.domain.errors import UseCaseError
from printlink.domain.models import MoveRequest
from printlink.domain.requests import RequestKind

from .payloads import acknowledged, encode_json


@dataclass
class MoveAxis:
    """Jog one axis; ``direction`` is a signed distance in millimetres."""

    router: TransportRouter

    def __call__(self, axis: str, direction: float) -> "Future[Optional[bool]]":
        try:
            move = MoveRequest(axis=str(axis).strip().upper(), direction=float(direction))
        except (TypeError, ValueError) as exc:
            raise UseCaseError("INVALID_MOVE", str(exc)) from None
        return acknowledged(self.router.route(RequestKind.MOVE, body=encode_json(move.to_dict())))


__all__ = ["MoveAxis"]
