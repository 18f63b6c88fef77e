"""File I/O and persistence modules."""

from .chapter_store import ChapterStore, FileChapterStore, MemoryChapterStore
from .file_handler import FileHandler
from .project_library import ProjectLibrary

__all__ = [
    "ChapterStore",
    "FileChapterStore",
    "MemoryChapterStore",
    "FileHandler",
    "ProjectLibrary",
]
