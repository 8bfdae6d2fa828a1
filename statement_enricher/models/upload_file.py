from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

"""UploadFile model: the named byte stream handed to the pipeline."""


@dataclass(frozen=True)
class UploadFile:
    """An uploaded file as received at the upload boundary."""
    name: str  # client-supplied file name, used to derive the output name
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Path) -> UploadFile:
        return cls(name=path.name, content=path.read_bytes())
