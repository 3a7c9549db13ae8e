"""
Chat sessions and citation lookup.

Messages are stored as sent; the assistant reply is not available yet.
Session counters are maintained by the ORM events on Message.
"""
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.db.models.chat import ChatSession, Message
from app.db.models.citation import Citation

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TITLE = "New Chat"


def create_session(db: Session, user_id: int, title: Optional[str] = None, description: Optional[str] = None) -> ChatSession:
    session = ChatSession(
        user_id=user_id,
        title=(title or "").strip() or DEFAULT_SESSION_TITLE,
        description=description,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info(f"Chat session created: user_id={user_id}, session_id={session.id}")
    return session


def get_session(db: Session, session_id: int) -> Optional[ChatSession]:
    return db.query(ChatSession).filter(ChatSession.id == session_id).first()


def list_sessions(db: Session, user_id: int, include_archived: bool = False) -> List[ChatSession]:
    query = db.query(ChatSession).filter(ChatSession.user_id == user_id)
    if not include_archived:
        query = query.filter(ChatSession.is_archived.is_(False))
    return query.order_by(ChatSession.updated_at.desc(), ChatSession.id.desc()).all()


def list_messages(db: Session, session_id: int) -> List[Message]:
    return (
        db.query(Message)
        .filter(Message.session_id == session_id)
        .order_by(Message.created_at, Message.id)
        .all()
    )


def post_message(db: Session, session: ChatSession, content: str, sender: str = "user") -> Message:
    message = Message(session_id=session.id, sender=sender, content=content)
    db.add(message)
    db.commit()
    db.refresh(message)
    db.refresh(session)
    return message


def get_message(db: Session, session_id: int, message_id: int) -> Optional[Message]:
    return (
        db.query(Message)
        .filter(Message.id == message_id, Message.session_id == session_id)
        .first()
    )


def delete_message(db: Session, message: Message) -> None:
    """Delete a message; the session counter is decremented by the ORM event."""
    session_id, message_id = message.session_id, message.id
    db.delete(message)
    db.commit()
    logger.info(f"Message deleted: session_id={session_id}, message_id={message_id}")


def archive_session(db: Session, session: ChatSession) -> ChatSession:
    session.is_archived = True
    db.commit()
    db.refresh(session)
    logger.info(f"Chat session archived: session_id={session.id}")
    return session


def search_citations(db: Session, query: str, limit: int = 20) -> List[Citation]:
    """Case-insensitive substring search over case names and citation text."""
    pattern = f"%{query.strip()}%"
    return (
        db.query(Citation)
        .filter(or_(Citation.case_name.ilike(pattern), Citation.citation_text.ilike(pattern)))
        .order_by(Citation.year.desc(), Citation.id)
        .limit(limit)
        .all()
    )
