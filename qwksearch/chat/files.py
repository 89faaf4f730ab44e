"""Resolve attached file ids into names and extracted text."""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

LOGGER = logging.getLogger(__name__)

EXTRACTED_SUFFIX = "-extracted.json"


@dataclass(slots=True)
class AttachedFile:
    """A file uploaded ahead of the chat request."""

    file_id: str
    name: str
    contents: str = ""

    def as_detail(self) -> dict[str, Any]:
        return {"fileId": self.file_id, "name": self.name}

    def context_block(self, max_chars: int) -> str | None:
        text = self.contents.strip()
        if not text:
            return None
        if len(text) > max_chars:
            text = text[:max_chars].rstrip() + "…"
        return f"File: {self.name}\n{text}"


def load_attached_files(upload_dir: Path, file_ids: Iterable[str]) -> list[AttachedFile]:
    """Read ``<file_id>-extracted.json`` for every id; unreadable files keep their id as name."""

    files: list[AttachedFile] = []
    for file_id in file_ids:
        if not file_id or Path(file_id).name != file_id:
            LOGGER.warning("Ignoring attached file with an invalid id | file_id=%r", file_id)
            continue
        path = Path(upload_dir) / f"{file_id}{EXTRACTED_SUFFIX}"
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            LOGGER.warning("Attached file has no extracted text | file_id=%s path=%s", file_id, path)
            files.append(AttachedFile(file_id=file_id, name=file_id))
            continue
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning("Attached file could not be read | file_id=%s error=%s", file_id, exc)
            files.append(AttachedFile(file_id=file_id, name=file_id))
            continue
        if not isinstance(payload, dict):
            payload = {}
        contents = payload.get("contents") or ""
        if isinstance(contents, list):
            contents = "\n".join(str(part) for part in contents)
        files.append(
            AttachedFile(
                file_id=file_id,
                name=str(payload.get("title") or file_id),
                contents=str(contents),
            )
        )
    return files


__all__ = ["AttachedFile", "EXTRACTED_SUFFIX", "load_attached_files"]
