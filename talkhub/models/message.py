import uuid

from sqlalchemy import Boolean, Column, ForeignKey, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from talkhub.database import Base


class Message(Base):
    __tablename__ = "messages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    conversation_id = Column(UUID(as_uuid=True), ForeignKey("conversations.id"), nullable=False, index=True)
    sender_type = Column(Text, nullable=False)  # customer, agent, bot
    sender_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"))
    content = Column(Text, nullable=False)
    message_type = Column(Text, default="text")  # text, image, document, audio
    file_url = Column(Text)
    is_read = Column(Boolean, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("Profile")

    @property
    def sender_name(self):
        return self.sender.full_name if self.sender is not None else None
