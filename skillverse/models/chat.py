"""
Direct messaging models for SkillVerse
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from skillverse.core.database import Base
from skillverse.models.base import utcnow


class Chat(Base):
    """Two-party conversation; participants stored with the lower id first"""
    __tablename__ = "chats"
    __table_args__ = (UniqueConstraint("user_low_id", "user_high_id", name="uq_chat_pair"),)

    id = Column(Integer, primary_key=True, index=True)
    user_low_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_high_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    last_message_id = Column(
        Integer,
        ForeignKey("messages.id", use_alter=True, name="fk_chat_last_message"),
        nullable=True,
    )

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, index=True)

    # Relationships
    user_low = relationship("User", foreign_keys=[user_low_id])
    user_high = relationship("User", foreign_keys=[user_high_id])
    messages = relationship(
        "Message",
        back_populates="chat",
        foreign_keys="Message.chat_id",
        order_by="Message.id",
        cascade="all, delete-orphan",
    )
    last_message = relationship("Message", foreign_keys=[last_message_id], post_update=True)

    @staticmethod
    def normalize_pair(user_a_id: int, user_b_id: int) -> tuple[int, int]:
        return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)

    @property
    def participant_ids(self) -> list[int]:
        return [self.user_low_id, self.user_high_id]

    @property
    def participants(self):
        return [self.user_low, self.user_high]

    def has_participant(self, user_id: int) -> bool:
        return user_id in (self.user_low_id, self.user_high_id)


class Message(Base):
    """One chat entry"""
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    chat_id = Column(Integer, ForeignKey("chats.id"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    chat = relationship("Chat", back_populates="messages", foreign_keys=[chat_id])
    sender = relationship("User")
