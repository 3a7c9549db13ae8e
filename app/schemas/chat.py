"""
Pydantic schemas for chat sessions, messages and citations.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ChatSessionCreate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None


class ChatSessionResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    is_archived: bool
    message_count: int
    last_message_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=20000)


class MessageResponse(BaseModel):
    id: int
    session_id: int
    sender: str
    content: str
    is_citation: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CitationResponse(BaseModel):
    id: int
    case_name: Optional[str] = None
    citation_text: str
    court: Optional[str] = None
    year: Optional[int] = None
    url: Optional[str] = None
    case_type: Optional[str] = None
    jurisdiction: str
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="metadata_")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class CitationListResponse(BaseModel):
    results: List[CitationResponse]
