"""
Per-conversation buffer: read-only history followed by an editable input region.

The document is `history_text + PROMPT + input_text`. `boundary` is the offset
where the input region starts; everything before it is history and cannot be
edited or navigated into.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from signal_bridge.models.entry import Entry, Severity

PROMPT = "> "

logger = logging.getLogger(__name__)


class BufferState(str, Enum):
    IDLE = "idle"
    COMPOSING = "composing"


class ConversationBuffer:
    def __init__(
        self,
        conversation_id: str,
        on_append: Optional[Callable[[str, Entry], None]] = None,
    ) -> None:
        self.conversation_id = conversation_id
        self._on_append = on_append
        self._entries: list[Entry] = []
        self._history = ""
        self._input = ""

    @property
    def entries(self) -> tuple[Entry, ...]:
        return tuple(self._entries)

    @property
    def history_text(self) -> str:
        return self._history

    @property
    def input_text(self) -> str:
        return self._input

    @property
    def text(self) -> str:
        return self._history + PROMPT + self._input

    @property
    def boundary(self) -> int:
        return len(self._history) + len(PROMPT)

    @property
    def state(self) -> BufferState:
        return BufferState.COMPOSING if self._input else BufferState.IDLE

    def append_entry(self, entry: Entry) -> None:
        """Splice an entry in at the boundary and redraw an empty input region.

        Whatever was typed but not yet sent is dropped: the input region is
        evicted before the entry goes in, not merged with it.
        """
        if self._input:
            logger.debug(f"{self.conversation_id}: discarding {len(self._input)} uncommitted chars on append")
        self._input = ""
        self._history += entry.render() + "\n"
        self._entries.append(entry)
        if self._on_append is not None:
            self._on_append(self.conversation_id, entry)

    def append_system_message(self, text: str, severity: Severity = Severity.INFO) -> Entry:
        entry = Entry.system(text, severity)
        self.append_entry(entry)
        return entry

    def take_input(self) -> str:
        """Return the trimmed input and clear the input region."""
        text = self._input.strip()
        self._input = ""
        return text

    def guard_cursor(self, pos: int) -> int:
        """Clamp a cursor position into the input region."""
        return min(max(pos, self.boundary), len(self.text))

    def insert(self, text: str, pos: Optional[int] = None) -> int:
        """Insert typed text at `pos` (end of input by default). Returns the new cursor."""
        at = self.guard_cursor(len(self.text) if pos is None else pos) - self.boundary
        self._input = self._input[:at] + text + self._input[at:]
        return self.boundary + at + len(text)

    def delete(self, start: int, end: int) -> int:
        """Delete [start, end) restricted to the input region. Returns the new cursor."""
        lo, hi = sorted((self.guard_cursor(start), self.guard_cursor(end)))
        a, b = lo - self.boundary, hi - self.boundary
        self._input = self._input[:a] + self._input[b:]
        return lo

    def set_input(self, text: str) -> None:
        self._input = text
