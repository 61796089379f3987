import uuid
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from talkhub.logging_config import get_logger
from talkhub.models import Conversation
from talkhub.services.errors import ConversationNotFoundError, HubError

logger = get_logger("conversation_service")

WHATSAPP_JID_SUFFIX = "@s.whatsapp.net"


def phone_from_jid(remote_jid: str) -> str:
    return remote_jid.replace(WHATSAPP_JID_SUFFIX, "")


def find_conversation_by_phone(db: Session, phone: str) -> Optional[Conversation]:
    return db.query(Conversation).filter(Conversation.customer_phone == phone).first()


def get_or_create_conversation(db: Session, phone: str, customer_name: str) -> Conversation:
    """Find the conversation for a phone number or open a new WhatsApp one.

    Creation is an insert that does nothing on a phone conflict, followed by a
    re-read, so two concurrent first messages end up on the same row.
    """
    conversation = find_conversation_by_phone(db, phone)
    if conversation:
        return conversation

    now = datetime.now(timezone.utc)
    stmt = (
        insert(Conversation)
        .values(
            id=uuid.uuid4(),
            customer_name=customer_name,
            customer_phone=phone,
            channel="whatsapp",
            status="open",
            priority="medium",
            last_message_at=now,
            created_at=now,
            updated_at=now,
        )
        .on_conflict_do_nothing(index_elements=["customer_phone"])
    )
    result = db.execute(stmt)
    if result.rowcount:
        logger.info("Conversation created", extra={"context": {"phone": phone}})

    conversation = find_conversation_by_phone(db, phone)
    if conversation is None:
        raise HubError("Failed to create conversation")
    return conversation


def get_conversation(db: Session, conversation_id: UUID) -> Conversation:
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if conversation is None:
        raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
    return conversation


def get_deliverable_conversation(db: Session, conversation_id: UUID) -> Conversation:
    """Conversation with a phone to deliver to; missing row and missing phone fail alike."""
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if conversation is None or not conversation.customer_phone:
        raise ConversationNotFoundError("Phone number not found")
    return conversation


def touch_conversation(db: Session, conversation: Conversation, *, reopen: bool = False) -> None:
    """Bump last activity; inbound traffic also re-opens the thread."""
    now = datetime.now(timezone.utc)
    conversation.last_message_at = now
    conversation.updated_at = now
    if reopen:
        conversation.status = "open"
    db.flush()
