from fastapi import APIRouter, Depends, HTTPException
from typing import List
import logging

from aria.core.exceptions import ValidationError
from aria.schemas.rag import (
    ChunkRecord,
    CreateDocumentRequest,
    CreateDocumentResponse,
    DocumentSummary,
    IngestResponse,
)
from aria.services.document_store import DocumentStore, get_document_store
from aria.services.embedding_service import EmbeddingClient, get_embedding_client
from aria.services.rag_service import embed_document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/rag", tags=["admin"])


@router.post("/documents", response_model=CreateDocumentResponse)
def create_document(
    request: CreateDocumentRequest,
    store: DocumentStore = Depends(get_document_store),
):
    """
    Store a document without embedding it. Follow up with
    POST /documents/{id}/embeddings to make it searchable.
    """
    missing = [name for name in ("title", "content", "type") if not (getattr(request, name) or "").strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    document_id = store.insert_document(
        title=request.title.strip(),
        content=request.content,
        document_type=request.type.strip(),
        metadata=request.metadata or {},
        insurance_provider=request.provider or None,
    )
    return CreateDocumentResponse(document_id=document_id, title=request.title.strip())


@router.post("/documents/{document_id}/embeddings", response_model=IngestResponse)
def generate_embeddings(
    document_id: str,
    store: DocumentStore = Depends(get_document_store),
    embedder: EmbeddingClient = Depends(get_embedding_client),
):
    """Chunk an existing document with a sliding window and embed each chunk."""
    result = embed_document(store, embedder, document_id)
    return IngestResponse(document_id=result.document_id, chunks_created=result.chunks_created)


@router.get("/documents", response_model=List[DocumentSummary])
def list_documents(store: DocumentStore = Depends(get_document_store)):
    return store.list_documents()


@router.get("/documents/{document_id}/chunks", response_model=List[ChunkRecord])
def get_document_chunks(document_id: str, store: DocumentStore = Depends(get_document_store)):
    if store.get_document(document_id) is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return store.get_chunks(document_id)


@router.delete("/documents/{document_id}")
def delete_document(document_id: str, store: DocumentStore = Depends(get_document_store)):
    """
    Delete a document and all its chunks. This is the cleanup path for a
    partially ingested document.
    """
    if not store.delete_document(document_id):
        raise HTTPException(status_code=404, detail="Document not found")
    logger.info(f"Admin deleted document {document_id}")
    return {"success": True, "message": "Document deleted successfully"}
