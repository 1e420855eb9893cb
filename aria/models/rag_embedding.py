import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, PickleType, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from aria.database import Base

class RagEmbedding(Base):
    __tablename__ = "rag_embeddings"
    __table_args__ = (
        UniqueConstraint("document_id", "chunk_index", name="uq_rag_embeddings_document_chunk"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    document_id = Column(String(36), ForeignKey("rag_documents.id", ondelete="CASCADE"), index=True, nullable=False)
    chunk_index = Column(Integer, nullable=False)
    chunk_text = Column(Text, nullable=False)
    embedding = Column(PickleType, nullable=False)  # Store as pickle for SQLite, or use pgvector for PostgreSQL
    metadata_ = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    document = relationship("RagDocument", back_populates="chunks")
