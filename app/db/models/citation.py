"""
Citation model - shared, read-only reference data.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from app.db.base import Base


class Citation(Base):
    __tablename__ = "citations"

    id = Column(Integer, primary_key=True, index=True)
    document_chunk_id = Column(Integer, ForeignKey("document_chunks.id", ondelete="SET NULL"), nullable=True)
    case_name = Column(String, nullable=True, index=True)
    citation_text = Column(Text, nullable=False)
    court = Column(String, nullable=True)
    year = Column(Integer, nullable=True)
    url = Column(String, nullable=True)
    case_type = Column(String, nullable=True)  # supreme_court | court_of_appeal | high_court | magistrate | statute | regulation
    jurisdiction = Column(String, nullable=False, default="Nigeria")
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
