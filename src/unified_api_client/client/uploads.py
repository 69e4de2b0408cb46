"""
unified_api_client.client.uploads

File extraction for multipart GraphQL mutations.

Responsibilities:
- Walk a GraphQL variables tree and pull every `FileUpload` out into a side list.
- Put a placeholder carrying the file's multipart index where each file was.
- Leave the input untouched; share every subtree that contained no files.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class FileUpload:
    """A binary leaf in a variables tree."""

    name: str
    content: bytes
    mime_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> FileUpload:
        p = Path(path)
        guessed, _ = mimetypes.guess_type(p.name)
        return cls(
            name=p.name,
            content=p.read_bytes(),
            mime_type=mime_type or guessed or "application/octet-stream",
        )


@dataclass(frozen=True, slots=True)
class UploadPlaceholder:
    multipart_index: int
    name: str
    mime_type: str
    size_bytes: int

    def as_json(self) -> dict[str, Any]:
        return {
            "multipartIndex": self.multipart_index,
            "name": self.name,
            "mimeType": self.mime_type,
            "sizeBytes": self.size_bytes,
        }


def replace_files(value: Any, out_files: list[FileUpload]) -> Any:
    """
    Return `value` with every `FileUpload` swapped for its placeholder.

    Files are appended to `out_files` in traversal order, so placeholder indices
    run 0..N-1 in the order they appear in the tree. A container is only copied
    when something beneath it changed; otherwise the original object is returned.
    """

    match value:
        case FileUpload():
            out_files.append(value)
            return UploadPlaceholder(
                multipart_index=len(out_files) - 1,
                name=value.name,
                mime_type=value.mime_type,
                size_bytes=value.size,
            ).as_json()
        case Mapping():
            changed = False
            replaced: dict[str, Any] = {}
            for key, child in value.items():
                new_child = replace_files(child, out_files)
                changed = changed or new_child is not child
                replaced[key] = new_child
            return replaced if changed else value
        case list() | tuple():
            changed = False
            items: list[Any] = []
            for child in value:
                new_child = replace_files(child, out_files)
                changed = changed or new_child is not child
                items.append(new_child)
            return items if changed else value
        case _:
            return value


# --- Module Notes -----------------------------------------------------------
# Strings and bytes are leaves even though they are sequences; only list/tuple recurse.
