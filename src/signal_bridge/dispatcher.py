"""
Routing of decoded daemon messages.

Notifications named `receive` carry envelopes and feed conversation buffers.
Error responses are matched to the request that caused them and reported in
the originating conversation. Everything else is dropped.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from signal_bridge.buffer import ConversationBuffer
from signal_bridge.collaborators import MediaRenderer, Notifier
from signal_bridge.correlator import RequestCorrelator
from signal_bridge.directory import ConversationDirectory
from signal_bridge.errors import ProtocolError
from signal_bridge.models.entry import Entry, EntryKind, Severity
from signal_bridge.models.envelope import DataMessage, Envelope, SentMessage, TypingMessage
from signal_bridge.models.rpc import ErrorResponse, Notification, Request, Response, RPCMessage
from signal_bridge.transport.envelope import parse_envelope

RECEIVE_METHOD = "receive"
TYPING_STARTED = "STARTED"
TYPING_STOPPED = "STOPPED"

logger = logging.getLogger(__name__)


def notification_body(message: DataMessage) -> str:
    if message.message:
        return message.message
    if message.sticker:
        return "[Sticker]"
    if message.attachments:
        return "[Attachment]"
    return "New message"


class EventDispatcher:
    def __init__(
        self,
        correlator: RequestCorrelator,
        directory: ConversationDirectory,
        buffer_for: Callable[[str], ConversationBuffer],
        notifier: Notifier,
        media: MediaRenderer,
        attachments_dir: Path,
        self_label: str = "Me",
        auto_reveal: bool = False,
        on_reveal: Optional[Callable[[str], None]] = None,
    ):
        self._correlator = correlator
        self._directory = directory
        self._buffer_for = buffer_for
        self._notifier = notifier
        self._media = media
        self._attachments_dir = attachments_dir
        self._self_label = self_label
        self._auto_reveal = auto_reveal
        self._on_reveal = on_reveal

    def dispatch(self, message: RPCMessage) -> None:
        if isinstance(message, (Notification, Request)) and message.method == RECEIVE_METHOD:
            self.handle_receive(message.params)
        elif isinstance(message, ErrorResponse):
            self.handle_error(message)
        elif isinstance(message, Response):
            # Consumes the correlation entry; a late error for this id is then unknown.
            self._correlator.resolve(message.id)
        elif isinstance(message, (Notification, Request)):
            logger.debug(f"Ignoring {type(message).__name__} {message.method!r}")

    def handle_error(self, message: ErrorResponse) -> None:
        err = ProtocolError(message.error.message or "Unknown error", message.error.code, message.id)
        context = self._correlator.resolve(message.id)
        if context is None:
            logger.warning(f"signal-cli error for request {message.id}: {err}")
            return
        logger.warning(f"signal-cli error for request {message.id} ({context}): {err}")
        self._buffer_for(str(context)).append_system_message(f"Error: {err}", Severity.ERROR)

    def handle_receive(self, params: dict[str, Any]) -> None:
        envelope = parse_envelope(params)
        if envelope is None:
            return

        sender_id = envelope.sender_id
        if sender_id and envelope.source_name:
            self._directory.set_name(sender_id, envelope.source_name)

        group_id = envelope.group_id
        if group_id:
            self._directory.mark_group(group_id)
            if envelope.group_name:
                self._directory.set_name(group_id, envelope.group_name)
        if envelope.sync_message is not None and envelope.sync_message.sent_message is not None:
            # Our own message from a linked device; it belongs to the destination.
            self._on_sent_message(envelope.sync_message.sent_message)
            return

        target = group_id or sender_id
        if not target:
            logger.debug("Envelope without sender or group, skipping")
            return
        self._directory.mark_active(target)

        if envelope.data_message is not None:
            self._on_data_message(envelope, target, envelope.data_message)
        elif envelope.typing_message is not None:
            self._on_typing(target, envelope.typing_message)

    def _on_data_message(self, envelope: Envelope, target: str, message: DataMessage) -> None:
        self._directory.set_typing(target, False)
        if not message.has_content:
            return
        sender_id = envelope.sender_id
        sender_name = envelope.source_name or self._directory.display_name(sender_id or "?")
        self._buffer_for(target).append_entry(Entry(
            kind=EntryKind.INCOMING,
            text=message.message or "",
            sender_id=sender_id,
            sender_name=sender_name,
            media=self._render_media(message),
        ))

        title = sender_name
        if target != sender_id:
            title = f"{sender_name} in {self._directory.display_name(target)}"
        self._notifier.notify(title, notification_body(message))
        if self._auto_reveal and self._on_reveal is not None:
            self._on_reveal(target)

    def _on_sent_message(self, message: SentMessage) -> None:
        destination = message.destination_id
        if not destination:
            logger.debug("Sync message without destination, skipping")
            return
        if message.group_info and message.group_info.group_id:
            self._directory.mark_group(destination)
        self._directory.mark_active(destination)
        if not message.has_content:
            return
        self._buffer_for(destination).append_entry(Entry(
            kind=EntryKind.OUTGOING,
            text=message.message or "",
            sender_name=self._self_label,
            media=self._render_media(message),
        ))

    def _on_typing(self, target: str, typing: TypingMessage) -> None:
        if typing.action == TYPING_STARTED:
            self._directory.set_typing(target, True)
        elif typing.action == TYPING_STOPPED:
            self._directory.set_typing(target, False)

    def _render_media(self, message: DataMessage) -> tuple[str, ...]:
        rendered: list[str] = []
        for attachment in message.attachments:
            path = Path(attachment.file) if attachment.file else self._attachments_dir / (attachment.id or "")
            try:
                rendered.append(self._media.render_attachment(path, attachment.content_type))
            except Exception as e:
                logger.warning(f"Could not render attachment {path}: {e}")
                rendered.append(f"[attachment: {attachment.filename or path.name}]")
        sticker = message.sticker
        if sticker is not None:
            try:
                rendered.append(self._media.render_sticker(sticker.pack_id, sticker.sticker_id, sticker.emoji))
            except Exception as e:
                logger.warning(f"Could not render sticker {sticker.pack_id}/{sticker.sticker_id}: {e}")
                rendered.append("[sticker]")
        return tuple(rendered)
