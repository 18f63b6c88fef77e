"""Durable per-chapter text storage."""

import logging
from pathlib import Path
from typing import Dict, Optional, Protocol, Union
from urllib.parse import quote

from .file_handler import FileHandler

logger = logging.getLogger(__name__)

KEY_PREFIX = "mojo-book-writer-chapter-"


def chapter_key(chapter_id: str) -> str:
    """Namespaced storage key for a chapter."""
    return f"{KEY_PREFIX}{chapter_id}"


class ChapterStore(Protocol):
    """Key-value store holding the last saved text of each chapter."""

    def get(self, chapter_id: str) -> Optional[str]:
        ...

    def set(self, chapter_id: str, text: str) -> None:
        ...

    def delete(self, chapter_id: str) -> None:
        ...


class MemoryChapterStore:
    """Chapter store kept in a dictionary."""

    def __init__(self, records: Optional[Dict[str, str]] = None):
        self.records: Dict[str, str] = {}
        for chapter_id, text in (records or {}).items():
            self.records[chapter_key(chapter_id)] = text

    def get(self, chapter_id: str) -> Optional[str]:
        return self.records.get(chapter_key(chapter_id))

    def set(self, chapter_id: str, text: str) -> None:
        self.records[chapter_key(chapter_id)] = text

    def delete(self, chapter_id: str) -> None:
        self.records.pop(chapter_key(chapter_id), None)


class FileChapterStore:
    """
    Chapter store with one UTF-8 file per key inside a directory.

    Keys are percent-encoded into file names, so any chapter id maps to a
    single file directly under ``root``.
    """

    def __init__(self, root: Union[str, Path], file_handler: Optional[FileHandler] = None):
        self.root = Path(root)
        self.file_handler = file_handler or FileHandler()

    def _path(self, chapter_id: str) -> Path:
        return self.root / f"{quote(chapter_key(chapter_id), safe='')}.md"

    def get(self, chapter_id: str) -> Optional[str]:
        text = self.file_handler.read_text(self._path(chapter_id))
        if text is None:
            logger.debug(f"No saved record for chapter {chapter_id}")
        return text

    def set(self, chapter_id: str, text: str) -> None:
        self.file_handler.write_file(self._path(chapter_id), text)
        logger.info(f"Saved chapter {chapter_id} ({len(text.split())} words)")

    def delete(self, chapter_id: str) -> None:
        if self.file_handler.delete_file(self._path(chapter_id)):
            logger.info(f"Deleted saved record for chapter {chapter_id}")
