"""File use cases: list, delete, print and upload G-code files on the printer."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from printlink.adapters.transport_router import TransportRouter
from printlink.domain.errors import UseCaseError
from printlink.domain.models import FileId, FileListing
from printlink.domain.requests import RequestKind

from .payloads import acknowledged, coerce_file_id, encode_json

log = logging.getLogger(__name__)


@dataclass
class ListFiles:
    router: TransportRouter

    def __call__(self) -> "Future[Optional[FileListing]]":
        return self.router.route_typed(RequestKind.LIST_FILES, FileListing.from_dict)


@dataclass
class DeleteFile:
    router: TransportRouter

    def __call__(self, file_id: Union[FileId, int]) -> "Future[Optional[bool]]":
        fid = coerce_file_id(file_id)
        log.info("Deleting file %s", fid)
        body = encode_json(fid.to_dict())
        return acknowledged(self.router.route(RequestKind.DELETE_FILE, body=body))


@dataclass
class PrintFile:
    router: TransportRouter

    def __call__(self, file_id: Union[FileId, int]) -> "Future[Optional[bool]]":
        fid = coerce_file_id(file_id)
        log.info("Starting print of file %s", fid)
        body = encode_json(fid.to_dict())
        return acknowledged(self.router.route(RequestKind.PRINT_FILE, body=body))


@dataclass
class UploadFile:
    """Send a local G-code file; the printer stores it under the file's stem."""

    router: TransportRouter

    def __call__(self, path: Union[str, Path]) -> "Future[Optional[bool]]":
        """Read ``path`` and post its raw bytes to the printer.

        Args:
            path: Local file to upload.

        Returns:
            Future resolving to ``True``/``False`` for a 2xx/non-2xx answer,
            or ``None`` when the printer is unreachable.

        Raises:
            UseCaseError: ``FILE_NOT_FOUND`` or ``FILE_READ_FAILED``.
        """
        src = Path(path)
        if not src.is_file():
            raise UseCaseError("FILE_NOT_FOUND", f"No such file: {src}")
        try:
            data = src.read_bytes()
        except OSError as exc:
            raise UseCaseError("FILE_READ_FAILED", f"Cannot read {src}: {exc}") from exc
        headers = _upload_headers(src.stem)
        log.info("Uploading %s (%d bytes)", src.name, len(data))
        return acknowledged(self.router.route(RequestKind.SEND_FILE, body=data, headers=headers))


def _upload_headers(name: Any) -> dict:
    # Content-Length is filled in by requests from the body.
    return {"File-Name": str(name), "Content-Type": "application/octet-stream"}


__all__ = ["DeleteFile", "ListFiles", "PrintFile", "UploadFile"]
