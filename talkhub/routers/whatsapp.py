import asyncio
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, File, Header, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from talkhub.database import get_db
from talkhub.logging_config import get_logger
from talkhub.schemas.message import SendMessageRequest, SendMessageResponse, UploadResponse
from talkhub.schemas.webhook import EvolutionEvent, MessageData, WebhookResponse
from talkhub.services.errors import HubError, InvalidUploadError
from talkhub.services.media_service import encode_upload
from talkhub.services.send_service import send_agent_message
from talkhub.services.webhook_service import deliver_auto_reply, process_inbound_message

logger = get_logger("whatsapp")

router = APIRouter(prefix="/whatsapp", tags=["whatsapp"])

MSG_INTERNAL_ERROR = "Internal error"


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


def _caller_id(authorization: Optional[str]) -> Optional[UUID]:
    """Profile id of the calling agent from ``Authorization: Bearer <id>``."""
    if not authorization:
        return None
    token = authorization.removeprefix("Bearer ").strip()
    if not token:
        return None
    try:
        return UUID(token)
    except ValueError:
        logger.info("Authorization token is not a profile id")
        return None


async def _read_json(request: Request) -> object:
    try:
        return await request.json()
    except ValueError as exc:
        raise HubError("Invalid JSON payload", "input_invalid") from exc


@router.get("/webhook")
async def webhook_check():
    """Answer GET checks from gateway setup screens; real events must use POST."""
    return {"ok": True, "message": "Use POST with JSON payload"}


@router.post("/webhook", response_model=WebhookResponse, response_model_exclude_none=True)
async def whatsapp_webhook(request: Request, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    """Receive an Evolution API event and store inbound customer messages."""
    try:
        payload = await _read_json(request)
        event = EvolutionEvent.model_validate(payload)
        logger.info("Webhook received", extra={"context": {"event": event.event, "instance": event.instance}})

        if not event.is_message_upsert:
            return WebhookResponse(success=True)

        data = MessageData.model_validate(event.data)
        if data.key.fromMe:
            logger.info("Ignoring own message", extra={"context": {"remote_jid": data.key.remoteJid}})
            return WebhookResponse(success=True, ignored=True)

        outcome = await asyncio.to_thread(process_inbound_message, db, data)
        await asyncio.to_thread(db.commit)
    except ValidationError as e:
        db.rollback()
        logger.warning("Webhook payload validation failed", extra={"context": {"error": str(e)}})
        return _error_response("Invalid webhook payload")
    except HubError as e:
        db.rollback()
        logger.error("Webhook failed", extra={"context": {"error": e.message, "code": e.error_code}})
        return _error_response(e.message)
    except Exception as e:
        db.rollback()
        logger.error("Webhook error", extra={"context": {"error": str(e)}}, exc_info=True)
        return _error_response(MSG_INTERNAL_ERROR)

    if outcome.auto_reply:
        background_tasks.add_task(
            deliver_auto_reply,
            outcome.hub_settings,
            outcome.phone,
            outcome.auto_reply,
            outcome.conversation.id,
        )

    return WebhookResponse(success=True, conversationId=outcome.conversation.id)


@router.post("/send", response_model=SendMessageResponse)
async def send_message(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
):
    """Send an agent message to the customer and record it."""
    try:
        payload = await _read_json(request)
        send_request = SendMessageRequest.model_validate(payload)
        data = await asyncio.to_thread(send_agent_message, db, send_request, sender_id=_caller_id(authorization))
        await asyncio.to_thread(db.commit)
    except ValidationError as e:
        db.rollback()
        logger.warning("Send payload validation failed", extra={"context": {"error": str(e)}})
        return _error_response("Invalid message payload")
    except HubError as e:
        db.rollback()
        logger.error("Send failed", extra={"context": {"error": e.message, "code": e.error_code}})
        return _error_response(e.message)
    except Exception as e:
        db.rollback()
        logger.error("Send error", extra={"context": {"error": str(e)}}, exc_info=True)
        return _error_response(MSG_INTERNAL_ERROR)

    return SendMessageResponse(success=True, data=data)


@router.post("/upload", response_model=UploadResponse)
async def upload_media(file: Optional[UploadFile] = File(default=None)):
    """Return the uploaded file base64-encoded for embedding in a send call."""
    try:
        if file is None or not file.filename:
            raise InvalidUploadError("No file uploaded")
        content = await file.read()
        uploaded = encode_upload(file.filename, file.content_type, content)
    except HubError as e:
        logger.warning("Upload rejected", extra={"context": {"error": e.message}})
        return _error_response(e.message)
    except Exception as e:
        logger.error("Upload error", extra={"context": {"error": str(e)}}, exc_info=True)
        return _error_response("Upload failed")

    logger.info("File encoded", extra={"context": {"name": uploaded.name, "size": uploaded.size}})
    return UploadResponse(success=True, file=uploaded)
