"""
SignalBridge — main client.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from signal_bridge.buffer import ConversationBuffer
from signal_bridge.collaborators import (
    LoggingNotifier, MediaRenderer, Notifier, NullNotifier, PlaceholderMediaRenderer,
)
from signal_bridge.config import BridgeConfig
from signal_bridge.directory import ConversationDirectory
from signal_bridge.dispatcher import EventDispatcher
from signal_bridge.errors import ProcessUnavailableError
from signal_bridge.models.entry import Entry, EntryKind
from signal_bridge.models.rpc import RPCMessage
from signal_bridge.transport.envelope import build_send_params
from signal_bridge.transport.process import ConnectionState, ProcessSupervisor

SEND_METHOD = "send"

logger = logging.getLogger(__name__)

EntryHandler = Callable[[str, Entry], None]


class SignalBridge:
    """Async signal-cli bridge.

    Owns the daemon connection and all conversation state. Every buffer,
    directory and correlation update happens on the event loop thread, from
    the supervisor's reader task or from a caller's coroutine.
    """

    def __init__(
        self,
        config: Optional[BridgeConfig] = None,
        notifier: Optional[Notifier] = None,
        media: Optional[MediaRenderer] = None,
        on_reveal: Optional[Callable[[str], None]] = None,
    ):
        self.config = config or BridgeConfig()
        if notifier is None:
            notifier = LoggingNotifier() if self.config.notify else NullNotifier()
        self.directory = ConversationDirectory()
        self._buffers: dict[str, ConversationBuffer] = {}
        self._entry_handlers: list[EntryHandler] = []

        self._supervisor = ProcessSupervisor(
            command=None,
            on_message=self._on_message,
            max_buffer_bytes=self.config.max_buffer_bytes,
            stop_timeout=self.config.stop_timeout,
        )
        self._supervisor.add_state_handler(self._on_state)
        self._dispatcher = EventDispatcher(
            correlator=self._supervisor.correlator,
            directory=self.directory,
            buffer_for=self.buffer,
            notifier=notifier,
            media=media or PlaceholderMediaRenderer(),
            attachments_dir=self.config.attachments_dir,
            self_label=self.config.self_label,
            auto_reveal=self.config.auto_reveal,
            on_reveal=on_reveal,
        )

    @property
    def supervisor(self) -> ProcessSupervisor:
        return self._supervisor

    @property
    def running(self) -> bool:
        return self._supervisor.running

    @property
    def state(self) -> ConnectionState:
        return self._supervisor.state

    async def start(self) -> None:
        """Start the daemon. Raises ConfigError when no account or command is set."""
        if not self._supervisor.running:
            self._supervisor.command = self.config.daemon_command()
        await self._supervisor.start()

    async def stop(self) -> None:
        await self._supervisor.stop()

    async def restart(self) -> None:
        """Restart the daemon; unanswered requests are forgotten."""
        await self._supervisor.restart()

    async def __aenter__(self) -> "SignalBridge":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.stop()

    def buffer(self, conversation_id: str) -> ConversationBuffer:
        """The conversation's buffer, created on first access."""
        buf = self._buffers.get(conversation_id)
        if buf is None:
            buf = ConversationBuffer(conversation_id, on_append=self._emit_entry)
            self._buffers[conversation_id] = buf
        return buf

    def add_entry_handler(self, handler: EntryHandler) -> Callable[[], None]:
        """Add a handler called with (conversation_id, entry) on every append. Returns a cleanup function."""
        self._entry_handlers.append(handler)
        def remove() -> None:
            try:
                self._entry_handlers.remove(handler)
            except ValueError:
                pass
        return remove

    def mark_group(self, conversation_id: str) -> None:
        """Address future sends to this id as a group."""
        self.directory.mark_group(conversation_id)

    def display_name(self, conversation_id: str) -> str:
        return self.directory.display_name(conversation_id)

    def conversations(self) -> list[tuple[str, str]]:
        """Active conversations as (id, display name), oldest first."""
        return self.directory.active()

    def send_message(self, conversation_id: str, text: str) -> int:
        """Send a text message. Returns the request id."""
        return self._send(conversation_id, text, None)

    def send_attachments(self, conversation_id: str, paths: Sequence[str], message: str = "") -> int:
        """Send files, with an optional caption. Returns the request id."""
        resolved = [str(Path(p).expanduser().resolve()) for p in paths]
        return self._send(conversation_id, message, resolved)

    def submit(self, conversation_id: str) -> Optional[str]:
        """Send whatever is in the conversation's input region.

        Returns the sent text, or None when the input was blank.
        """
        if not self.running:
            raise ProcessUnavailableError()
        text = self.buffer(conversation_id).take_input()
        if not text:
            return None
        self.send_message(conversation_id, text)
        return text

    def _send(self, conversation_id: str, text: str, attachments: Optional[list[str]]) -> int:
        if not self.running:
            raise ProcessUnavailableError()
        params = build_send_params(
            conversation_id,
            self.directory.is_group(conversation_id),
            message=text,
            attachments=attachments,
        )
        request_id = self._supervisor.request(SEND_METHOD, params, context=conversation_id)
        self.directory.mark_active(conversation_id)
        self.buffer(conversation_id).append_entry(Entry(
            kind=EntryKind.OUTGOING,
            text=text,
            sender_name=self.config.self_label,
            media=tuple(f"[file: {p}]" for p in attachments or ()),
        ))
        return request_id

    def _on_message(self, message: RPCMessage) -> None:
        self._dispatcher.dispatch(message)

    def _emit_entry(self, conversation_id: str, entry: Entry) -> None:
        for handler in list(self._entry_handlers):
            handler(conversation_id, entry)

    def _on_state(self, state: ConnectionState) -> None:
        logger.info(f"signal-cli connection {state.value}")
