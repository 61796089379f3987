from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from talkhub.models import Conversation, Profile, Ticket
from talkhub.schemas.dashboard import ConversationUpdate
from talkhub.services.conversation_service import get_conversation


def get_dashboard_stats(db: Session) -> dict[str, int]:
    return {
        "totalConversations": db.query(Conversation).count(),
        "openTickets": db.query(Ticket).filter(Ticket.status == "open").count(),
        "activeAgents": db.query(Profile).filter(Profile.status == "online").count(),
    }


def list_conversations(db: Session, status: Optional[str] = None) -> list[Conversation]:
    query = db.query(Conversation)
    if status:
        query = query.filter(Conversation.status == status)
    return query.order_by(Conversation.last_message_at.desc().nulls_last()).all()


def update_conversation(db: Session, conversation_id: UUID, changes: ConversationUpdate) -> Conversation:
    conversation = get_conversation(db, conversation_id)
    for field, value in changes.model_dump(exclude_unset=True).items():
        setattr(conversation, field, value)
    conversation.updated_at = datetime.now(timezone.utc)
    db.flush()
    return conversation


def list_agents(db: Session) -> list[Profile]:
    return db.query(Profile).order_by(Profile.created_at.desc()).all()
