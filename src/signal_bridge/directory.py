"""
Conversation directory — display names, group ids, and the active set.
"""

from typing import Optional


class ConversationDirectory:
    def __init__(self) -> None:
        self._names: dict[str, str] = {}
        self._groups: set[str] = set()
        # dict keeps activation order for the dashboard
        self._active: dict[str, None] = {}
        self._typing: set[str] = set()

    def set_name(self, conversation_id: str, name: str) -> None:
        if conversation_id and name:
            self._names[conversation_id] = name

    def name(self, conversation_id: str) -> Optional[str]:
        return self._names.get(conversation_id)

    def display_name(self, conversation_id: str) -> str:
        return self._names.get(conversation_id) or conversation_id

    def mark_group(self, conversation_id: str) -> None:
        self._groups.add(conversation_id)

    def is_group(self, conversation_id: str) -> bool:
        return conversation_id in self._groups

    def mark_active(self, conversation_id: str) -> None:
        self._active.setdefault(conversation_id, None)

    def is_active(self, conversation_id: str) -> bool:
        return conversation_id in self._active

    def active(self) -> list[tuple[str, str]]:
        """(conversation_id, display_name) for every active conversation, oldest first."""
        return [(cid, self.display_name(cid)) for cid in self._active]

    def set_typing(self, conversation_id: str, typing: bool) -> None:
        if typing:
            self._typing.add(conversation_id)
        else:
            self._typing.discard(conversation_id)

    def is_typing(self, conversation_id: str) -> bool:
        return conversation_id in self._typing
