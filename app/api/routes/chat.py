"""
Chat session endpoints.

Messages are stored but not answered yet; the assistant is coming soon.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.core.auth_dependency import get_current_user
from app.core.ownership import ensure_owner_or_admin
from app.schemas.chat import ChatSessionCreate, ChatSessionResponse, MessageCreate, MessageResponse
from app.services import chat_service

router = APIRouter(prefix="/chat", tags=["Chat"])


def _owned_session(db: Session, session_id: int, user: User):
    session = chat_service.get_session(db, session_id)
    return ensure_owner_or_admin(session, user, detail="Chat session not found")


@router.post("/sessions", status_code=status.HTTP_201_CREATED, response_model=ChatSessionResponse)
def create_session(
    payload: ChatSessionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return chat_service.create_session(db, current_user.id, payload.title, payload.description)


@router.get("/sessions", response_model=list[ChatSessionResponse])
def list_sessions(
    include_archived: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return chat_service.list_sessions(db, current_user.id, include_archived)


@router.get("/sessions/{session_id}/messages", response_model=list[MessageResponse])
def list_messages(session_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    session = _owned_session(db, session_id, current_user)
    return chat_service.list_messages(db, session.id)


@router.post("/sessions/{session_id}/messages", status_code=status.HTTP_201_CREATED, response_model=MessageResponse)
def post_message(
    session_id: int,
    payload: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    session = _owned_session(db, session_id, current_user)
    return chat_service.post_message(db, session, payload.content)


@router.post("/sessions/{session_id}/archive", response_model=ChatSessionResponse)
def archive_session(session_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    session = _owned_session(db, session_id, current_user)
    return chat_service.archive_session(db, session)


@router.delete("/sessions/{session_id}/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_message(
    session_id: int,
    message_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    session = _owned_session(db, session_id, current_user)
    message = chat_service.get_message(db, session.id, message_id)
    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    chat_service.delete_message(db, message)
