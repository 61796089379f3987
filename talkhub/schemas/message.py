from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator


class SendMessageRequest(BaseModel):
    conversationId: UUID
    content: str = ""
    messageType: Literal["text", "image", "document"] = "text"
    fileUrl: Optional[str] = None

    @field_validator("content", mode="before")
    @classmethod
    def none_content_is_empty(cls, value: object) -> object:
        return "" if value is None else value


class SendMessageResponse(BaseModel):
    success: bool
    data: Optional[Any] = None


class UploadedFile(BaseModel):
    name: str
    type: str
    size: int
    data: str


class UploadResponse(BaseModel):
    success: bool
    file: UploadedFile
