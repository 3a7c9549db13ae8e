"""
Document and DocumentChunk models.

Uploaded document metadata plus chunk rows with an embedding column. No
chunking, embedding or retrieval pipeline writes these yet.
"""
from sqlalchemy import Column, Integer, BigInteger, String, Text, DateTime, ForeignKey, JSON, Index, event, update, case
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.base import Base

DOCUMENT_FILE_TYPES = ("pdf", "docx", "txt")


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    original_filename = Column(String, nullable=False)
    file_type = Column(String, nullable=False)  # pdf | docx | txt
    file_size = Column(BigInteger, nullable=True)
    storage_path = Column(String, nullable=True)

    status = Column(String, nullable=False, default="uploaded", index=True)  # uploaded | processing | processed | failed
    processing_error = Column(Text, nullable=True)
    total_chunks = Column(Integer, nullable=False, default=0)
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", backref="documents")
    chunks = relationship("DocumentChunk", back_populates="document", passive_deletes=True)

    __table_args__ = (
        Index("idx_documents_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<Document(id={self.id}, name='{self.name}', chunks={self.total_chunks})>"


class DocumentChunk(Base):
    __tablename__ = "document_chunks"

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    embedding = Column(JSON, nullable=True)  # 1536 floats
    chunk_number = Column(Integer, nullable=False)
    chunk_size = Column(Integer, nullable=True)
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    document = relationship("Document", back_populates="chunks")


@event.listens_for(DocumentChunk, "after_insert")
def _increment_chunk_count(mapper, connection, target):
    connection.execute(
        update(Document.__table__)
        .where(Document.__table__.c.id == target.document_id)
        .values(total_chunks=Document.__table__.c.total_chunks + 1, updated_at=func.now())
    )


@event.listens_for(DocumentChunk, "after_delete")
def _decrement_chunk_count(mapper, connection, target):
    total = Document.__table__.c.total_chunks
    connection.execute(
        update(Document.__table__)
        .where(Document.__table__.c.id == target.document_id)
        .values(total_chunks=case((total > 0, total - 1), else_=0), updated_at=func.now())
    )
