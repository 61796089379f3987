"""JSON API backing the agent dashboard pages."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from talkhub.database import get_db
from talkhub.schemas.dashboard import (
    AgentOut,
    BotResponseCreate,
    BotResponseOut,
    BotResponseUpdate,
    ConversationOut,
    ConversationStatus,
    ConversationUpdate,
    DashboardStats,
    HubSettingsOut,
    HubSettingsUpdate,
    MarkReadResponse,
    MessageOut,
    TicketCreate,
    TicketOut,
    TicketStatus,
    TicketUpdate,
)
from talkhub.services.bot_service import (
    create_bot_response,
    delete_bot_response,
    list_bot_responses,
    update_bot_response,
)
from talkhub.services.conversation_service import get_conversation
from talkhub.services.dashboard_service import (
    get_dashboard_stats,
    list_agents,
    list_conversations,
    update_conversation,
)
from talkhub.services.errors import ConversationNotFoundError, UnknownSettingError
from talkhub.services.message_service import list_messages, mark_conversation_read
from talkhub.services.settings_service import list_settings, update_setting
from talkhub.services.ticket_service import create_ticket, list_tickets, update_ticket

router = APIRouter(prefix="/api", tags=["dashboard"])


def _not_found(error: ConversationNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)


@router.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats(db: Session = Depends(get_db)):
    return DashboardStats(**get_dashboard_stats(db))


# === CONVERSATIONS ===


@router.get("/conversations", response_model=list[ConversationOut])
def get_conversations(status: Optional[ConversationStatus] = None, db: Session = Depends(get_db)):
    return list_conversations(db, status)


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageOut])
def get_conversation_messages(conversation_id: UUID, db: Session = Depends(get_db)):
    try:
        get_conversation(db, conversation_id)
    except ConversationNotFoundError as e:
        raise _not_found(e)
    return list_messages(db, conversation_id)


@router.patch("/conversations/{conversation_id}", response_model=ConversationOut)
def patch_conversation(conversation_id: UUID, changes: ConversationUpdate, db: Session = Depends(get_db)):
    try:
        conversation = update_conversation(db, conversation_id, changes)
    except ConversationNotFoundError as e:
        raise _not_found(e)
    db.commit()
    return conversation


@router.post("/conversations/{conversation_id}/read", response_model=MarkReadResponse)
def mark_read(conversation_id: UUID, db: Session = Depends(get_db)):
    try:
        get_conversation(db, conversation_id)
    except ConversationNotFoundError as e:
        raise _not_found(e)
    updated = mark_conversation_read(db, conversation_id)
    db.commit()
    return MarkReadResponse(conversation_id=conversation_id, updated=updated)


# === TICKETS ===


@router.get("/tickets", response_model=list[TicketOut])
def get_tickets(status: Optional[TicketStatus] = None, db: Session = Depends(get_db)):
    return list_tickets(db, status)


@router.post("/tickets", response_model=TicketOut, status_code=status.HTTP_201_CREATED)
def post_ticket(data: TicketCreate, db: Session = Depends(get_db)):
    if not data.title.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    ticket = create_ticket(db, data)
    db.commit()
    return ticket


@router.patch("/tickets/{ticket_id}", response_model=TicketOut)
def patch_ticket(ticket_id: UUID, changes: TicketUpdate, db: Session = Depends(get_db)):
    ticket = update_ticket(db, ticket_id, changes)
    if ticket is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Ticket {ticket_id} not found")
    db.commit()
    return ticket


# === AGENTS ===


@router.get("/agents", response_model=list[AgentOut])
def get_agents(db: Session = Depends(get_db)):
    return list_agents(db)


# === SETTINGS ===


@router.get("/settings", response_model=HubSettingsOut)
def get_settings(db: Session = Depends(get_db)):
    return HubSettingsOut(**list_settings(db))


@router.put("/settings", response_model=HubSettingsOut)
def put_settings(changes: HubSettingsUpdate, db: Session = Depends(get_db)):
    try:
        for key, value in changes.model_dump(exclude_unset=True).items():
            if isinstance(value, bool):
                value = "true" if value else "false"
            update_setting(db, key, value)
    except UnknownSettingError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    db.commit()
    return HubSettingsOut(**list_settings(db))


# === BOT RESPONSES ===


@router.get("/bot-responses", response_model=list[BotResponseOut])
def get_bot_responses(db: Session = Depends(get_db)):
    return list_bot_responses(db)


@router.post("/bot-responses", response_model=BotResponseOut, status_code=status.HTTP_201_CREATED)
def post_bot_response(data: BotResponseCreate, db: Session = Depends(get_db)):
    if not data.keyword.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Keyword is required")
    response = create_bot_response(
        db,
        data.keyword,
        data.response_text,
        is_active=data.is_active,
        category=data.category,
    )
    db.commit()
    return response


@router.patch("/bot-responses/{response_id}", response_model=BotResponseOut)
def patch_bot_response(response_id: UUID, changes: BotResponseUpdate, db: Session = Depends(get_db)):
    response = update_bot_response(db, response_id, changes.model_dump(exclude_unset=True))
    if response is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Bot response {response_id} not found")
    db.commit()
    return response


@router.delete("/bot-responses/{response_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_bot_response(response_id: UUID, db: Session = Depends(get_db)):
    if not delete_bot_response(db, response_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Bot response {response_id} not found")
    db.commit()
