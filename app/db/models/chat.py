"""
Chat session and message models.

The assistant itself is not available yet; sessions and messages are stored so
the conversation surface can be built against a stable schema.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, Index, event, update, case
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.base import Base


class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False, default="New Chat")
    description = Column(Text, nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    message_count = Column(Integer, nullable=False, default=0)
    last_message_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    messages = relationship("Message", back_populates="session", passive_deletes=True)

    def __repr__(self):
        return f"<ChatSession(id={self.id}, user_id={self.user_id}, messages={self.message_count})>"


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    sender = Column(String, nullable=False)  # user | ai | system
    content = Column(Text, nullable=False)
    is_citation = Column(Boolean, nullable=False, default=False)
    citation_metadata = Column(JSON, nullable=False, default=dict)
    tokens_used = Column(Integer, nullable=False, default=0)
    model_used = Column(String, nullable=True)
    processing_time_ms = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    session = relationship("ChatSession", back_populates="messages")

    __table_args__ = (
        Index("idx_messages_session_created", "session_id", "created_at"),
    )


@event.listens_for(Message, "before_insert")
def _stamp_message(mapper, connection, target):
    if target.created_at is None:
        target.created_at = datetime.utcnow()


@event.listens_for(Message, "after_insert")
def _increment_message_count(mapper, connection, target):
    connection.execute(
        update(ChatSession.__table__)
        .where(ChatSession.__table__.c.id == target.session_id)
        .values(
            message_count=ChatSession.__table__.c.message_count + 1,
            last_message_at=target.created_at,
            updated_at=func.now(),
        )
    )


@event.listens_for(Message, "after_delete")
def _decrement_message_count(mapper, connection, target):
    count = ChatSession.__table__.c.message_count
    connection.execute(
        update(ChatSession.__table__)
        .where(ChatSession.__table__.c.id == target.session_id)
        .values(
            message_count=case((count > 0, count - 1), else_=0),
            updated_at=func.now(),
        )
    )
