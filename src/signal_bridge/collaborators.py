"""
Interfaces to the pieces that live outside the bridge: notification delivery
and media rendering. The defaults only log or produce text placeholders.
"""

import logging
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, title: str, body: str) -> None: ...


class MediaRenderer(Protocol):
    def render_attachment(self, local_path: Path, content_type: str) -> str: ...

    def render_sticker(self, pack_id: str, sticker_id: int, emoji: Optional[str]) -> str: ...


class LoggingNotifier:
    def notify(self, title: str, body: str) -> None:
        logger.info(f"{title}: {body}")


class NullNotifier:
    def notify(self, title: str, body: str) -> None:
        pass


class PlaceholderMediaRenderer:
    """Render media as bracketed text lines."""

    def render_attachment(self, local_path: Path, content_type: str) -> str:
        kind = content_type.split("/", 1)[0] if content_type else "file"
        if kind not in ("image", "video", "audio"):
            kind = "file"
        return f"[{kind}: {local_path}]"

    def render_sticker(self, pack_id: str, sticker_id: int, emoji: Optional[str]) -> str:
        return f"[sticker {emoji}]" if emoji else "[sticker]"
