"""Per-chapter undo/redo history of chapter text."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ContentHistory:
    """
    Undo/redo triple for one chapter.

    ``past`` is ordered oldest first, ``future`` is ordered most recently
    undone first. Instances are immutable; every transition returns a new one.
    """

    present: str = ""
    past: Tuple[str, ...] = ()
    future: Tuple[str, ...] = ()

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    def with_edit(self, new_text: str, limit: Optional[int] = None) -> "ContentHistory":
        """Return the history after a forward edit (no-op when text is unchanged)."""
        if new_text == self.present:
            return self
        past = self.past + (self.present,)
        if limit is not None and len(past) > limit:
            past = past[len(past) - limit:]
        return ContentHistory(present=new_text, past=past, future=())

    def undone(self) -> "ContentHistory":
        """Return the history after one undo step."""
        if not self.past:
            return self
        return ContentHistory(
            present=self.past[-1],
            past=self.past[:-1],
            future=(self.present,) + self.future,
        )

    def redone(self) -> "ContentHistory":
        """Return the history after one redo step."""
        if not self.future:
            return self
        return ContentHistory(
            present=self.future[0],
            past=self.past + (self.present,),
            future=self.future[1:],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert history to dictionary for serialization."""
        return {
            "past": list(self.past),
            "present": self.present,
            "future": list(self.future),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentHistory":
        """Create history from dictionary."""
        return cls(
            present=data.get("present", "") or "",
            past=tuple(data.get("past", [])),
            future=tuple(data.get("future", [])),
        )


class ContentHistoryStore:
    """
    Map of chapter id to ContentHistory with copy-on-write updates.

    Every mutation builds a new mapping, so a view returned by ``snapshot()``
    keeps showing the state it was taken from. All operations are total:
    unknown chapter ids are ignored and read as an empty string.

    ``history_limit`` caps how many past snapshots are kept per chapter; the
    oldest are dropped first. ``None`` keeps everything.
    """

    def __init__(self, history_limit: Optional[int] = None):
        self.history_limit = history_limit
        self._entries: Mapping[str, ContentHistory] = MappingProxyType({})

    def _replace(self, chapter_id: str, history: Optional[ContentHistory]) -> None:
        entries = dict(self._entries)
        if history is None:
            entries.pop(chapter_id, None)
        else:
            entries[chapter_id] = history
        self._entries = MappingProxyType(entries)

    def _transition(self, chapter_id: str, step) -> None:
        current = self._entries.get(chapter_id)
        if current is None:
            return
        updated = step(current)
        if updated is not current:
            self._replace(chapter_id, updated)

    def snapshot(self) -> Mapping[str, ContentHistory]:
        """Read-only view of the whole map as it is right now."""
        return self._entries

    def has_entry(self, chapter_id: str) -> bool:
        return chapter_id in self._entries

    def get_history(self, chapter_id: str) -> Optional[ContentHistory]:
        return self._entries.get(chapter_id)

    def get_current(self, chapter_id: str) -> str:
        """Return the present text of a chapter, or "" when it was never hydrated."""
        history = self._entries.get(chapter_id)
        return history.present if history else ""

    def can_undo(self, chapter_id: str) -> bool:
        history = self._entries.get(chapter_id)
        return bool(history and history.can_undo)

    def can_redo(self, chapter_id: str) -> bool:
        history = self._entries.get(chapter_id)
        return bool(history and history.can_redo)

    def hydrate(self, chapter_id: str, initial_text: str) -> None:
        """Create the history for a chapter unless one already exists."""
        if chapter_id in self._entries:
            return
        self._replace(chapter_id, ContentHistory(present=initial_text or ""))

    def commit_edit(self, chapter_id: str, new_text: str) -> None:
        """Record a forward edit; identical text leaves the history untouched."""
        self._transition(chapter_id, lambda h: h.with_edit(new_text, self.history_limit))

    def undo(self, chapter_id: str) -> None:
        self._transition(chapter_id, lambda h: h.undone())

    def redo(self, chapter_id: str) -> None:
        self._transition(chapter_id, lambda h: h.redone())

    def revert(self, chapter_id: str, durable_text: str) -> None:
        """Reset the chapter to the durable text, discarding undo and redo lineage."""
        self._replace(chapter_id, ContentHistory(present=durable_text or ""))

    def remove(self, chapter_id: str) -> None:
        """Drop the history of a chapter (next selection hydrates again)."""
        if chapter_id in self._entries:
            self._replace(chapter_id, None)

    def clear(self) -> None:
        """Forget every chapter history."""
        self._entries = MappingProxyType({})

    def to_pairs(self) -> List[List[Any]]:
        """Serialize as an explicit list of [chapter_id, history] pairs."""
        return [[chapter_id, history.to_dict()] for chapter_id, history in self._entries.items()]

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[Iterable[Any]],
        history_limit: Optional[int] = None,
    ) -> "ContentHistoryStore":
        """Create a store from a list produced by ``to_pairs``."""
        store = cls(history_limit=history_limit)
        entries = {}
        for chapter_id, data in pairs:
            entries[str(chapter_id)] = ContentHistory.from_dict(data or {})
        store._entries = MappingProxyType(entries)
        return store
