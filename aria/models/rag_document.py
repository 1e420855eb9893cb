import uuid

from sqlalchemy import Column, String, Text, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from aria.database import Base

class RagDocument(Base):
    __tablename__ = "rag_documents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    document_type = Column(String, index=True, nullable=False)
    insurance_provider = Column(String, index=True, nullable=True)
    # "metadata" is reserved on declarative classes
    metadata_ = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    chunks = relationship(
        "RagEmbedding",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="RagEmbedding.chunk_index",
    )
