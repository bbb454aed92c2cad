"""
Conversation history entries.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class EntryKind(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"
    SYSTEM = "system"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Entry(BaseModel):
    """One immutable line of conversation history."""

    model_config = ConfigDict(frozen=True)

    kind: EntryKind
    text: str = ""
    sender_id: Optional[str] = None
    sender_name: Optional[str] = None
    severity: Optional[Severity] = None
    media: tuple[str, ...] = ()
    timestamp: datetime = Field(default_factory=datetime.now)

    @classmethod
    def system(cls, text: str, severity: Severity = Severity.INFO) -> "Entry":
        return cls(kind=EntryKind.SYSTEM, text=text, severity=Severity(severity))

    def render(self) -> str:
        """Plain-text form used inside a conversation buffer."""
        stamp = self.timestamp.strftime("%H:%M")
        if self.kind == EntryKind.SYSTEM:
            label = "***" if self.severity in (None, Severity.INFO) else f"*** {self.severity.value}:"
            return f"[{stamp}] {label} {self.text}"
        lines = [f"[{stamp}] {self.sender_name or self.sender_id or '?'}: {self.text}".rstrip()]
        lines.extend(f"    {item}" for item in self.media)
        return "\n".join(lines)
