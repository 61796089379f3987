import uuid

from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.sql import func

from talkhub.database import Base


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False)
    description = Column(Text)
    status = Column(Text, default="open")  # open, in_progress, resolved, closed
    priority = Column(Text, default="medium")
    category = Column(Text)
    conversation_id = Column(UUID(as_uuid=True), ForeignKey("conversations.id"))
    assigned_agent_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"))
    created_by = Column(UUID(as_uuid=True), ForeignKey("profiles.id"))
    resolved_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
