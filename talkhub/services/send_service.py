from typing import Any, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from talkhub.logging_config import get_logger
from talkhub.schemas.message import SendMessageRequest
from talkhub.services.conversation_service import get_deliverable_conversation, touch_conversation
from talkhub.services.evolution_client import EvolutionClient, build_gateway_payload
from talkhub.services.message_service import save_message
from talkhub.services.settings_service import load_hub_settings

logger = get_logger("send_service")


def send_agent_message(db: Session, request: SendMessageRequest, sender_id: Optional[UUID] = None) -> Any:
    """Deliver an agent message through the gateway, then record it.

    Nothing is written unless the gateway accepted the message.
    """
    api_url, api_key = load_hub_settings(db).require_gateway()
    conversation = get_deliverable_conversation(db, request.conversationId)

    payload = build_gateway_payload(
        conversation.customer_phone,
        request.content,
        request.messageType,
        request.fileUrl,
    )
    data = EvolutionClient(api_url, api_key).send(payload).unwrap()

    save_message(
        db,
        conversation.id,
        "agent",
        request.content,
        message_type=request.messageType,
        file_url=request.fileUrl,
        sender_id=sender_id,
    )
    touch_conversation(db, conversation)
    logger.info(
        "Agent message sent",
        extra={
            "context": {
                "conversation_id": str(conversation.id),
                "message_type": request.messageType,
                "sender_id": str(sender_id) if sender_id else None,
            }
        },
    )
    return data
