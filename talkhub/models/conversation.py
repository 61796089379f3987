import uuid

from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.dialects.postgresql import ARRAY, TIMESTAMP, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from talkhub.database import Base


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    customer_name = Column(Text, nullable=False)
    customer_phone = Column(Text, unique=True)
    customer_email = Column(Text)
    channel = Column(Text, default="whatsapp")
    status = Column(Text, default="open")  # open, pending, resolved, closed
    priority = Column(Text, default="medium")  # low, medium, high, urgent
    tags = Column(ARRAY(Text))
    assigned_agent_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"))
    last_message_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    messages = relationship("Message", back_populates="conversation", order_by="Message.created_at")
