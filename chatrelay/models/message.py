from sqlalchemy import Column, ForeignKey, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base

class Message(Base):
    __tablename__ = "messages"

    # Sender information, username is denormalized so history survives user removal
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    user = relationship("User", back_populates="messages")
    username = Column(String(50), nullable=False)

    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<Message(id={self.id}, user_id={self.user_id}, text='{self.text[:50]}...')>"
