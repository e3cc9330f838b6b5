"""Fixed-capacity conversation transcript.

The session store owns the cap: a Transcript is a ring of the newest
entries, so appending past capacity drops the oldest entries rather
than summarizing them.
"""

from collections import deque
from collections.abc import Iterable, Iterator
from typing import Any

from pydantic import BaseModel

from src.shared.types import MessageRole

HISTORY_CAP = 50


class TranscriptEntry(BaseModel):
    """One role/content pair in a transcript."""

    role: MessageRole
    content: str

    def to_input_item(self) -> dict[str, str]:
        """Render as a model input message dict."""
        return {"role": self.role.value, "content": self.content}


class Transcript:
    """Ring buffer of the newest transcript entries.

    Args:
        entries: Initial entries, oldest first. Accepts TranscriptEntry
            instances or {"role", "content"} dicts.
        cap: Maximum number of entries retained.
    """

    def __init__(
        self,
        entries: Iterable[TranscriptEntry | dict[str, Any]] = (),
        cap: int = HISTORY_CAP,
    ) -> None:
        if cap < 1:
            raise ValueError("transcript cap must be positive")
        self._entries: deque[TranscriptEntry] = deque(maxlen=cap)
        self.extend(entries)

    @property
    def cap(self) -> int:
        """Maximum number of retained entries."""
        return self._entries.maxlen or 0

    def append(self, entry: TranscriptEntry | dict[str, Any]) -> None:
        """Append one entry, evicting the oldest at capacity."""
        if not isinstance(entry, TranscriptEntry):
            entry = TranscriptEntry.model_validate(entry)
        self._entries.append(entry)

    def extend(self, entries: Iterable[TranscriptEntry | dict[str, Any]]) -> None:
        """Append entries in order."""
        for entry in entries:
            self.append(entry)

    def entries(self) -> list[TranscriptEntry]:
        """Return entries oldest first."""
        return list(self._entries)

    def to_documents(self) -> list[dict[str, str]]:
        """Return entries as JSON-ready dicts for persistence."""
        return [entry.model_dump(mode="json") for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TranscriptEntry]:
        return iter(self._entries)
