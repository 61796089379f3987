"""Inbound Evolution API events: normalize, store, auto-reply."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from talkhub.logging_config import get_logger
from talkhub.models import Conversation, Message
from talkhub.schemas.webhook import MessageContent, MessageData
from talkhub.services.bot_service import find_bot_response, get_active_bot_responses
from talkhub.services.conversation_service import get_or_create_conversation, phone_from_jid, touch_conversation
from talkhub.services.evolution_client import EvolutionClient
from talkhub.services.message_service import save_message
from talkhub.services.settings_service import HubSettings, load_hub_settings

logger = get_logger("webhook_service")

IMAGE_PLACEHOLDER = "[Imagem]"
DOCUMENT_PLACEHOLDER = "[Documento]"
AUDIO_PLACEHOLDER = "[Áudio]"


class InboundKind(str, Enum):
    TEXT = "text"
    EXTENDED_TEXT = "extended_text"
    IMAGE = "image"
    DOCUMENT = "document"
    AUDIO = "audio"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class InboundContent:
    kind: InboundKind
    content: str
    message_type: str = "text"
    file_url: Optional[str] = None


@dataclass
class InboundOutcome:
    conversation: Conversation
    phone: str
    customer_message: Message
    bot_message: Optional[Message] = None
    hub_settings: Optional[HubSettings] = None

    @property
    def auto_reply(self) -> Optional[str]:
        return self.bot_message.content if self.bot_message else None


def classify_message(message: Optional[MessageContent]) -> InboundContent:
    """Decode the WhatsApp payload variant into (content, message_type, file_url).

    Variants are checked in a fixed order and exactly one applies.
    """
    if message is None:
        return InboundContent(InboundKind.UNKNOWN, "")
    if message.conversation:
        return InboundContent(InboundKind.TEXT, message.conversation)
    if message.extendedTextMessage is not None:
        return InboundContent(InboundKind.EXTENDED_TEXT, message.extendedTextMessage.text or "")
    if message.imageMessage is not None:
        media = message.imageMessage
        return InboundContent(InboundKind.IMAGE, media.caption or IMAGE_PLACEHOLDER, "image", media.url)
    if message.documentMessage is not None:
        media = message.documentMessage
        return InboundContent(InboundKind.DOCUMENT, media.caption or DOCUMENT_PLACEHOLDER, "document", media.url)
    if message.audioMessage is not None:
        return InboundContent(InboundKind.AUDIO, AUDIO_PLACEHOLDER, "audio", message.audioMessage.url)
    return InboundContent(InboundKind.UNKNOWN, "")


def process_inbound_message(db: Session, data: MessageData) -> InboundOutcome:
    """Store an inbound customer message and, on a keyword hit, the bot reply.

    Delivery of the bot reply is left to the caller so it can run after the
    transaction commits.
    """
    phone = phone_from_jid(data.key.remoteJid)
    customer_name = data.pushName or phone

    conversation = get_or_create_conversation(db, phone, customer_name)

    inbound = classify_message(data.message)
    customer_message = save_message(
        db,
        conversation.id,
        "customer",
        inbound.content,
        message_type=inbound.message_type,
        file_url=inbound.file_url,
    )
    touch_conversation(db, conversation, reopen=True)

    logger.info(
        "Inbound message stored",
        extra={
            "context": {
                "conversation_id": str(conversation.id),
                "phone": phone,
                "kind": inbound.kind.value,
            }
        },
    )

    outcome = InboundOutcome(conversation=conversation, phone=phone, customer_message=customer_message)

    hub_settings = load_hub_settings(db)
    outcome.hub_settings = hub_settings
    if not hub_settings.bot_enabled:
        return outcome

    matched = find_bot_response(get_active_bot_responses(db), inbound.content)
    if matched is None:
        return outcome

    outcome.bot_message = save_message(db, conversation.id, "bot", matched.response_text)
    touch_conversation(db, conversation)
    logger.info(
        "Auto-response matched",
        extra={"context": {"conversation_id": str(conversation.id), "keyword": matched.keyword}},
    )
    return outcome


def deliver_auto_reply(hub_settings: HubSettings, phone: str, text: str, conversation_id: UUID) -> bool:
    """Send a bot reply through the gateway.

    Never raises: a missing gateway configuration or a failed delivery is
    logged and reported as False. The stored bot message is kept either way.
    """
    context = {"conversation_id": str(conversation_id), "phone": phone}
    if not hub_settings.gateway_configured:
        logger.warning("Auto-reply not sent: Evolution API not configured", extra={"context": context})
        return False

    try:
        client = EvolutionClient(hub_settings.api_url, hub_settings.api_key)
        result = client.send_text(phone, text)
    except Exception as e:
        logger.warning("Auto-reply delivery raised", extra={"context": {**context, "error": str(e)}})
        return False

    if not result.ok:
        logger.warning(
            "Auto-reply delivery failed",
            extra={"context": {**context, "error": result.error, "status": result.status_code}},
        )
        return False
    return True
