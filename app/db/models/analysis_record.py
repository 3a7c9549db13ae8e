"""
AnalysisRecord model - the content-addressed analysis cache.

One row per unique (user, resume text, job description text). Rows are written
once and served verbatim on identical resubmissions.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Index, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.base import Base


class AnalysisRecord(Base):
    __tablename__ = "resume_analyses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # SHA-256 hex digests of the raw texts
    resume_hash = Column(String(64), nullable=False)
    job_description_hash = Column(String(64), nullable=False)

    # Denormalized summary fields
    compatibility_score = Column(Integer, nullable=False, default=0)  # 0-100
    keyword_matches = Column(JSON, nullable=False, default=list)  # Present keywords
    skill_gaps = Column(JSON, nullable=False, default=list)  # Missing keywords
    experience_gaps = Column(JSON, nullable=False, default=list)  # gaps_and_suggestions

    analysis_details = Column(JSON, nullable=False)  # Full structured result
    analysis_types = Column(JSON, nullable=False, default=list)  # Types the provider was asked for

    original_resume_text = Column(Text, nullable=False)
    original_job_description = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    user = relationship("User", backref="analyses")

    __table_args__ = (
        UniqueConstraint("user_id", "resume_hash", "job_description_hash", name="uq_analysis_fingerprint"),
        Index("idx_analysis_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<AnalysisRecord(id={self.id}, user_id={self.user_id}, score={self.compatibility_score})>"
