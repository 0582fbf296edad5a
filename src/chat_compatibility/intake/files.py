"""Uploaded files and the acceptance filter.

An UploadedFile either carries its payload in memory (HTTP uploads) or points
at a path that is read when the request is assembled (local script runs).
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel

from ..errors import IntakeReadError

TEXT_MIME_TYPE = "text/plain"
TEXT_EXTENSION = ".txt"
DEFAULT_MIME_TYPE = "application/octet-stream"


class UploadedFile(BaseModel):
    name: str
    mime_type: str
    size_bytes: int = 0
    payload: Optional[Union[bytes, str]] = None
    path: Optional[Path] = None

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: Optional[str] = None) -> "UploadedFile":
        return cls(
            name=name,
            mime_type=mime_type or guess_mime_type(name),
            size_bytes=len(data),
            payload=data,
        )

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "UploadedFile":
        """Reference a file on disk without reading it yet."""
        path = Path(path)
        try:
            size = path.stat().st_size
        except OSError:
            size = 0
        return cls(name=path.name, mime_type=guess_mime_type(path.name), size_bytes=size, path=path)

    @property
    def media_type(self) -> str:
        """Declared type without parameters, e.g. "text/plain; charset=utf-8" -> "text/plain"."""
        return self.mime_type.split(";", 1)[0].strip().lower()

    def read_bytes(self) -> bytes:
        if self.payload is not None:
            if isinstance(self.payload, str):
                return self.payload.encode("utf-8")
            return self.payload
        if self.path is None:
            raise IntakeReadError(self.name, "no payload and no backing path")
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise IntakeReadError(self.name, str(e)) from e

    def read_text(self) -> str:
        if isinstance(self.payload, str):
            return self.payload
        # Exports saved on Windows often start with a BOM
        return self.read_bytes().decode("utf-8-sig", errors="replace")


def guess_mime_type(name: str) -> str:
    mime_type, _ = mimetypes.guess_type(name)
    return mime_type or DEFAULT_MIME_TYPE


def is_image(file: UploadedFile) -> bool:
    return file.media_type.startswith("image/")


def is_text(file: UploadedFile) -> bool:
    return file.media_type == TEXT_MIME_TYPE or file.name.lower().endswith(TEXT_EXTENSION)


def is_accepted(file: UploadedFile) -> bool:
    return is_image(file) or is_text(file)
