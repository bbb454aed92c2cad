"""
Envelope models for `receive` notifications.

signal-cli sends camelCase keys; the models expose snake_case attributes.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SignalModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class GroupInfo(SignalModel):
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    type: Optional[str] = None


class Attachment(SignalModel):
    id: Optional[str] = None
    content_type: str = "application/octet-stream"
    filename: Optional[str] = None
    size: Optional[int] = None
    file: Optional[str] = None   # local path, newer signal-cli versions only


class Sticker(SignalModel):
    pack_id: str = ""
    sticker_id: int = 0
    emoji: Optional[str] = None


class DataMessage(SignalModel):
    timestamp: Optional[int] = None
    message: Optional[str] = None
    attachments: list[Attachment] = []
    sticker: Optional[Sticker] = None
    group_info: Optional[GroupInfo] = None

    @property
    def has_content(self) -> bool:
        return bool(self.message or self.attachments or self.sticker)


class SentMessage(DataMessage):
    destination: Optional[str] = None
    destination_number: Optional[str] = None
    destination_uuid: Optional[str] = None

    @property
    def destination_id(self) -> Optional[str]:
        if self.group_info and self.group_info.group_id:
            return self.group_info.group_id
        return self.destination_number or self.destination or self.destination_uuid


class SyncMessage(SignalModel):
    sent_message: Optional[SentMessage] = None


class TypingMessage(SignalModel):
    action: str = ""             # "STARTED" | "STOPPED"
    timestamp: Optional[int] = None
    group_id: Optional[str] = None


class Envelope(SignalModel):
    source: Optional[str] = None
    source_number: Optional[str] = None
    source_uuid: Optional[str] = None
    source_name: Optional[str] = None
    source_device: Optional[int] = None
    timestamp: Optional[int] = None
    group_info: Optional[GroupInfo] = None
    data_message: Optional[DataMessage] = None
    sync_message: Optional[SyncMessage] = None
    typing_message: Optional[TypingMessage] = None

    @property
    def sender_id(self) -> Optional[str]:
        return self.source_number or self.source or self.source_uuid

    @property
    def group_id(self) -> Optional[str]:
        candidates: list[Optional[GroupInfo]] = [self.group_info]
        if self.data_message:
            candidates.append(self.data_message.group_info)
        if self.sync_message and self.sync_message.sent_message:
            candidates.append(self.sync_message.sent_message.group_info)
        for info in candidates:
            if info is not None and info.group_id:
                return info.group_id
        if self.typing_message and self.typing_message.group_id:
            return self.typing_message.group_id
        return None

    @property
    def group_name(self) -> Optional[str]:
        for info in (self.group_info, self.data_message.group_info if self.data_message else None):
            if info is not None and info.group_name:
                return info.group_name
        return None
