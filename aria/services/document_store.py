"""
Document and chunk persistence with similarity search.

``DocumentStore`` is the contract the RAG pipeline depends on. Ranking is the
store's job: results come back sorted by descending similarity, all at or
above the threshold, at most ``limit`` long.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import func, text
from sqlalchemy.orm import Session

from aria.database import get_db
from aria.models.rag_document import RagDocument
from aria.models.rag_embedding import RagEmbedding
from aria.schemas.rag import ChunkMatch
from aria.services.embedding_service import cosine_similarity

logger = logging.getLogger(__name__)


class DocumentStore(ABC):
    @abstractmethod
    def insert_document(
        self,
        title: str,
        content: str,
        document_type: str,
        metadata: Optional[Dict[str, Any]] = None,
        insurance_provider: Optional[str] = None,
    ) -> str:
        """Persist a document and return its id."""

    @abstractmethod
    def insert_chunk(
        self,
        document_id: str,
        index: int,
        text: str,
        embedding: List[float],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Persist one embedded chunk."""

    @abstractmethod
    def search(
        self,
        query_embedding: List[float],
        threshold: float,
        limit: int,
        category: Optional[str] = None,
        insurance_provider: Optional[str] = None,
    ) -> List[ChunkMatch]:
        """Nearest chunks to ``query_embedding``."""

    @abstractmethod
    def stats(self) -> Dict[str, Any]:
        """Connection state and row counts for health reporting."""

    @abstractmethod
    def get_document(self, document_id: str) -> Optional[RagDocument]:
        """The document row, or None."""

    @abstractmethod
    def list_documents(self) -> List[Dict[str, Any]]:
        """Every document with its ``chunk_count``, newest first."""

    @abstractmethod
    def get_chunks(self, document_id: str) -> List[RagEmbedding]:
        """A document's chunks ordered by ``chunk_index``."""

    @abstractmethod
    def delete_chunks(self, document_id: str) -> int:
        """Drop a document's chunks, keeping the document. Returns the number removed."""

    @abstractmethod
    def delete_document(self, document_id: str) -> bool:
        """Delete a document and its chunks. False when it does not exist."""


class SqlDocumentStore(DocumentStore):
    """
    SQLAlchemy-backed store. Similarity is scored in-process with numpy.

    Every insert commits on its own so that chunks written before a failure
    survive it.
    """

    def __init__(self, db: Session):
        self.db = db

    def insert_document(self, title, content, document_type, metadata=None, insurance_provider=None) -> str:
        document = RagDocument(
            title=title,
            content=content,
            document_type=document_type,
            insurance_provider=insurance_provider,
            metadata_=metadata or {},
        )
        self.db.add(document)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(document)
        logger.info(f"Document stored (ID: {document.id}, type: {document_type})")
        return document.id

    def insert_chunk(self, document_id, index, text, embedding, metadata=None) -> None:
        chunk = RagEmbedding(
            document_id=document_id,
            chunk_index=index,
            chunk_text=text,
            embedding=list(embedding),
            metadata_=metadata or {},
        )
        self.db.add(chunk)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def search(self, query_embedding, threshold, limit, category=None, insurance_provider=None) -> List[ChunkMatch]:
        query = self.db.query(RagEmbedding, RagDocument).join(
            RagDocument, RagEmbedding.document_id == RagDocument.id
        )
        if category:
            query = query.filter(RagDocument.document_type == category)
        if insurance_provider:
            query = query.filter(RagDocument.insurance_provider == insurance_provider)

        matches = []
        for chunk, document in query.all():
            if not chunk.embedding:
                continue
            similarity = min(max(cosine_similarity(query_embedding, chunk.embedding), 0.0), 1.0)
            if similarity < threshold:
                continue
            matches.append(ChunkMatch(
                id=chunk.id,
                text=chunk.chunk_text,
                similarity=similarity,
                document_id=document.id,
                document_title=document.title,
                document_type=document.document_type,
                insurance_provider=document.insurance_provider,
                chunk_index=chunk.chunk_index,
                metadata=chunk.metadata_ or {},
            ))

        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches[:limit]

    def stats(self) -> Dict[str, Any]:
        try:
            self.db.execute(text("SELECT 1"))
            documents = self.db.query(func.count(RagDocument.id)).scalar() or 0
            embeddings = self.db.query(func.count(RagEmbedding.id)).scalar() or 0
        except Exception as e:
            logger.error(f"Document store health check failed: {e}")
            return {"connected": False, "documentsCount": 0, "embeddingsCount": 0}
        return {"connected": True, "documentsCount": documents, "embeddingsCount": embeddings}

    def get_document(self, document_id: str) -> Optional[RagDocument]:
        return self.db.get(RagDocument, document_id)

    def list_documents(self) -> List[Dict[str, Any]]:
        rows = (
            self.db.query(RagDocument, func.count(RagEmbedding.id))
            .outerjoin(RagEmbedding, RagEmbedding.document_id == RagDocument.id)
            .group_by(RagDocument.id)
            .order_by(RagDocument.created_at.desc())
            .all()
        )
        return [
            {
                "id": doc.id,
                "title": doc.title,
                "document_type": doc.document_type,
                "insurance_provider": doc.insurance_provider,
                "created_at": doc.created_at,
                "chunk_count": count,
            }
            for doc, count in rows
        ]

    def get_chunks(self, document_id: str) -> List[RagEmbedding]:
        return (
            self.db.query(RagEmbedding)
            .filter(RagEmbedding.document_id == document_id)
            .order_by(RagEmbedding.chunk_index)
            .all()
        )

    def delete_chunks(self, document_id: str) -> int:
        removed = (
            self.db.query(RagEmbedding)
            .filter(RagEmbedding.document_id == document_id)
            .delete(synchronize_session="fetch")
        )
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        if removed:
            logger.info(f"Removed {removed} existing chunks of document {document_id}")
        return removed

    def delete_document(self, document_id: str) -> bool:
        document = self.get_document(document_id)
        if not document:
            return False
        self.db.delete(document)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Document {document_id} deleted with its chunks")
        return True


def get_document_store(db: Session = Depends(get_db)) -> DocumentStore:
    """FastAPI dependency; overridden in tests."""
    return SqlDocumentStore(db)
