from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

MESSAGES_UPSERT = "messages.upsert"


class MessageKey(BaseModel):
    remoteJid: str
    fromMe: bool = False
    id: Optional[str] = None


class TextContent(BaseModel):
    text: Optional[str] = None


class MediaContent(BaseModel):
    caption: Optional[str] = None
    url: Optional[str] = None
    mimetype: Optional[str] = None


class MessageContent(BaseModel):
    conversation: Optional[str] = None
    extendedTextMessage: Optional[TextContent] = None
    imageMessage: Optional[MediaContent] = None
    documentMessage: Optional[MediaContent] = None
    audioMessage: Optional[MediaContent] = None

    model_config = ConfigDict(extra="allow")


class MessageData(BaseModel):
    key: MessageKey
    pushName: Optional[str] = None
    message: Optional[MessageContent] = None
    messageTimestamp: Optional[int] = None


class EvolutionEvent(BaseModel):
    event: str
    instance: Optional[str] = None
    # Shape depends on the event; only messages.upsert is decoded into MessageData.
    data: Optional[Any] = None

    @property
    def is_message_upsert(self) -> bool:
        return self.event == MESSAGES_UPSERT


class WebhookResponse(BaseModel):
    success: bool = True
    ignored: Optional[bool] = None
    conversationId: Optional[UUID] = None
