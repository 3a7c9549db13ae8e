"""
TailoredResume model - premium output generated from an analysis.
"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.base import Base


class TailoredResume(Base):
    __tablename__ = "tailored_resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    analysis_id = Column(Integer, ForeignKey("resume_analyses.id", ondelete="CASCADE"), nullable=False, unique=True)

    tailored_resume = Column(Text, nullable=False)
    improvements = Column(JSON, nullable=False, default=list)
    cover_letter = Column(Text, nullable=True)
    cover_letter_key_points = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    analysis = relationship("AnalysisRecord", backref="tailored")

    def __repr__(self):
        return f"<TailoredResume(id={self.id}, analysis_id={self.analysis_id})>"
