from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from talkhub.logging_config import get_logger
from talkhub.models import Ticket
from talkhub.schemas.dashboard import TicketCreate, TicketUpdate

logger = get_logger("ticket_service")


def list_tickets(db: Session, status: Optional[str] = None) -> list[Ticket]:
    query = db.query(Ticket)
    if status:
        query = query.filter(Ticket.status == status)
    return query.order_by(Ticket.created_at.desc()).all()


def create_ticket(db: Session, data: TicketCreate, created_by: Optional[UUID] = None) -> Ticket:
    now = datetime.now(timezone.utc)
    ticket = Ticket(
        **data.model_dump(),
        status="open",
        created_by=created_by,
        created_at=now,
        updated_at=now,
    )
    db.add(ticket)
    db.flush()
    logger.info("Ticket created", extra={"context": {"ticket_id": str(ticket.id), "title": ticket.title}})
    return ticket


def update_ticket(db: Session, ticket_id: UUID, changes: TicketUpdate) -> Optional[Ticket]:
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if ticket is None:
        return None

    now = datetime.now(timezone.utc)
    updates = changes.model_dump(exclude_unset=True)
    new_status = updates.get("status")
    if new_status == "resolved" and ticket.status != "resolved":
        ticket.resolved_at = now
    elif new_status and new_status not in {"resolved", "closed"}:
        ticket.resolved_at = None

    for field, value in updates.items():
        setattr(ticket, field, value)
    ticket.updated_at = now
    db.flush()
    return ticket
