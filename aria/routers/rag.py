from fastapi import APIRouter, Depends
import logging

from aria.core.config import settings
from aria.schemas.rag import (
    DatabaseHealth,
    HealthResponse,
    IngestRequest,
    IngestResponse,
    QueryRequest,
    QueryResponse,
)
from aria.services.document_store import DocumentStore, get_document_store
from aria.services.embedding_service import EmbeddingClient, get_embedding_client
from aria.services.rag_service import ingest_document, query_documents

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rag", tags=["rag"])


@router.post("/ingest", response_model=IngestResponse)
def ingest(
    request: IngestRequest,
    store: DocumentStore = Depends(get_document_store),
    embedder: EmbeddingClient = Depends(get_embedding_client),
):
    """
    Add a document to the knowledge base: store it, split it into
    sentence-bounded chunks and embed each chunk in order.
    """
    logger.info(f"RAG ingest request: '{request.title}' ({request.category})")
    result = ingest_document(
        store,
        embedder,
        title=request.title,
        content=request.content,
        category=request.category,
        metadata=request.metadata,
        insurance_provider=request.insurance_provider,
    )
    return IngestResponse(document_id=result.document_id, chunks_created=result.chunks_created)


@router.post("/query", response_model=QueryResponse)
def query(
    request: QueryRequest,
    store: DocumentStore = Depends(get_document_store),
    embedder: EmbeddingClient = Depends(get_embedding_client),
):
    """Semantic search over the knowledge base."""
    result = query_documents(
        store,
        embedder,
        query=request.query,
        category=request.category,
        insurance_provider=request.insurance_provider,
        match_count=request.match_count,
        threshold=request.threshold,
    )
    return QueryResponse(
        results=result.results,
        query=result.query,
        total_results=result.total_results,
        processing_time=result.processing_time,
    )


@router.get("/health", response_model=HealthResponse)
def health(store: DocumentStore = Depends(get_document_store)):
    stats = store.stats()
    return HealthResponse(
        status="healthy" if stats.get("connected") else "unhealthy",
        database=DatabaseHealth(
            connected=stats.get("connected", False),
            documents_count=stats.get("documentsCount", 0),
            embeddings_count=stats.get("embeddingsCount", 0),
        ),
        version=settings.version,
    )
