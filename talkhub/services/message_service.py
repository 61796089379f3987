from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from talkhub.models import Message

SENDER_TYPES = {"customer", "agent", "bot"}
MESSAGE_TYPES = {"text", "image", "document", "audio"}


def save_message(
    db: Session,
    conversation_id: UUID,
    sender_type: str,
    content: str,
    *,
    message_type: str = "text",
    file_url: Optional[str] = None,
    sender_id: Optional[UUID] = None,
) -> Message:
    """Save message to database."""
    if sender_type not in SENDER_TYPES:
        raise ValueError(f"Unknown sender_type: {sender_type}")
    if message_type not in MESSAGE_TYPES:
        raise ValueError(f"Unknown message_type: {message_type}")

    message = Message(
        conversation_id=conversation_id,
        sender_type=sender_type,
        sender_id=sender_id,
        content=content or "",
        message_type=message_type,
        file_url=file_url,
        is_read=False,
        created_at=datetime.now(timezone.utc),
    )
    db.add(message)
    db.flush()
    return message


def list_messages(db: Session, conversation_id: UUID) -> list[Message]:
    return (
        db.query(Message)
        .options(joinedload(Message.sender))
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.asc())
        .all()
    )


def mark_conversation_read(db: Session, conversation_id: UUID) -> int:
    """Mark unread customer messages as read, returning how many changed."""
    updated = (
        db.query(Message)
        .filter(
            Message.conversation_id == conversation_id,
            Message.sender_type == "customer",
            Message.is_read.is_(False),
        )
        .update({Message.is_read: True}, synchronize_session=False)
    )
    db.flush()
    return updated
