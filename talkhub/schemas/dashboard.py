from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

ConversationStatus = Literal["open", "pending", "resolved", "closed"]
TicketStatus = Literal["open", "in_progress", "resolved", "closed"]
Priority = Literal["low", "medium", "high", "urgent"]


def _reject_null(value):
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


class DashboardStats(BaseModel):
    totalConversations: int
    openTickets: int
    activeAgents: int


class ConversationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    customer_name: str
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    channel: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    tags: Optional[list[str]] = None
    assigned_agent_id: Optional[UUID] = None
    last_message_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ConversationUpdate(BaseModel):
    status: Optional[ConversationStatus] = None
    priority: Optional[Priority] = None
    assigned_agent_id: Optional[UUID] = None

    status_priority_not_null = field_validator("status", "priority", mode="before")(_reject_null)


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    conversation_id: UUID
    sender_type: str
    sender_id: Optional[UUID] = None
    sender_name: Optional[str] = None
    content: str
    message_type: Optional[str] = None
    file_url: Optional[str] = None
    is_read: Optional[bool] = None
    created_at: Optional[datetime] = None


class MarkReadResponse(BaseModel):
    conversation_id: UUID
    updated: int


class TicketOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    category: Optional[str] = None
    conversation_id: Optional[UUID] = None
    assigned_agent_id: Optional[UUID] = None
    created_by: Optional[UUID] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class TicketCreate(BaseModel):
    title: str
    description: Optional[str] = None
    priority: Priority = "medium"
    category: Optional[str] = None
    conversation_id: Optional[UUID] = None
    assigned_agent_id: Optional[UUID] = None


class TicketUpdate(BaseModel):
    status: Optional[TicketStatus] = None
    priority: Optional[Priority] = None
    assigned_agent_id: Optional[UUID] = None

    status_priority_not_null = field_validator("status", "priority", mode="before")(_reject_null)


class AgentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None


class HubSettingsOut(BaseModel):
    evolution_api_url: Optional[str] = None
    evolution_api_key: Optional[str] = None
    bot_enabled: Optional[str] = None
    bot_greeting: Optional[str] = None


class HubSettingsUpdate(BaseModel):
    evolution_api_url: Optional[str] = None
    evolution_api_key: Optional[str] = None
    bot_enabled: Optional[bool] = None
    bot_greeting: Optional[str] = None


class BotResponseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    keyword: str
    response_text: str
    is_active: Optional[bool] = None
    category: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None


class BotResponseCreate(BaseModel):
    keyword: str
    response_text: str
    is_active: bool = True
    category: Optional[str] = None


class BotResponseUpdate(BaseModel):
    keyword: Optional[str] = None
    response_text: Optional[str] = None
    is_active: Optional[bool] = None
    category: Optional[str] = None

    required_fields_not_null = field_validator("keyword", "response_text", "is_active", mode="before")(_reject_null)

    @field_validator("keyword")
    @classmethod
    def keyword_not_blank(cls, value):
        if value is not None and not value.strip():
            raise ValueError("keyword must not be blank")
        return value
