"""
RAG ingestion and query orchestration.

Ingestion: text -> chunker -> embedder (one chunk at a time) -> store.
Query: text -> embedder -> store.search -> filter -> ranked matches.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from aria.core.config import settings
from aria.core.exceptions import (
    AppException,
    NotFoundError,
    PartialIngestionError,
    ValidationError,
)
from aria.schemas.rag import ChunkMatch
from aria.services.chunker import ChunkingStrategy, chunk_text
from aria.services.document_store import DocumentStore
from aria.services.embedding_service import EmbeddingClient

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    document_id: str
    chunks_created: int


@dataclass
class QueryResult:
    results: List[ChunkMatch]
    query: str
    total_results: int
    processing_time: float


def _require(**fields: Optional[str]) -> None:
    missing = [name for name, value in fields.items() if not isinstance(value, str) or not value.strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def ingest_document(
    store: DocumentStore,
    embedder: EmbeddingClient,
    title: Optional[str],
    content: Optional[str],
    category: Optional[str],
    metadata: Optional[Dict[str, Any]] = None,
    insurance_provider: Optional[str] = None,
    strategy: Optional[str] = None,
    max_length: Optional[int] = None,
    overlap: Optional[int] = None,
) -> IngestionResult:
    """
    Store a document, then chunk, embed and store its chunks in order.

    A failure on chunk ``i`` stops the loop and raises PartialIngestionError
    carrying ``i`` as the number of chunks stored. Those chunks and the
    document row are left in place.
    """
    _require(title=title, content=content, category=category)

    document_id = store.insert_document(
        title=title.strip(),
        content=content,
        document_type=category.strip(),
        metadata=metadata or {},
        insurance_provider=insurance_provider,
    )

    chunks = chunk_text(
        content,
        strategy=strategy or settings.rag.ingest_strategy,
        max_length=max_length or settings.rag.ingest_max_length,
        overlap=settings.rag.ingest_overlap if overlap is None else overlap,
    )
    chunk_metadata = {"title": title.strip(), "category": category.strip()}
    if insurance_provider:
        chunk_metadata["insurance_provider"] = insurance_provider

    created = _embed_and_store(store, embedder, document_id, chunks, chunk_metadata)
    logger.info(f"Ingestion complete - document {document_id}, {created} chunks")
    return IngestionResult(document_id=document_id, chunks_created=created)


def embed_document(
    store: DocumentStore,
    embedder: EmbeddingClient,
    document_id: str,
    strategy: Optional[str] = None,
    chunk_size: Optional[int] = None,
    overlap: Optional[int] = None,
) -> IngestionResult:
    """
    Chunk and embed a stored document from scratch.

    Chunks left by an earlier run (complete or partial) are removed first, so
    a failed job can simply be retried.
    """
    document = store.get_document(document_id)
    if document is None:
        raise NotFoundError("Document not found")

    store.delete_chunks(document_id)

    chunks = chunk_text(
        document.content,
        strategy=strategy or settings.rag.admin_strategy,
        max_length=chunk_size or settings.rag.admin_chunk_size,
        overlap=settings.rag.admin_overlap if overlap is None else overlap,
    )
    chunk_metadata = {"title": document.title, "category": document.document_type}
    if document.insurance_provider:
        chunk_metadata["insurance_provider"] = document.insurance_provider

    created = _embed_and_store(store, embedder, document_id, chunks, chunk_metadata)
    return IngestionResult(document_id=document_id, chunks_created=created)


def _embed_and_store(
    store: DocumentStore,
    embedder: EmbeddingClient,
    document_id: str,
    chunks: List[str],
    metadata: Dict[str, Any],
) -> int:
    for index, chunk in enumerate(chunks):
        try:
            embedding = embedder.embed(chunk)
            store.insert_chunk(
                document_id=document_id,
                index=index,
                text=chunk,
                embedding=embedding,
                metadata=dict(metadata),
            )
        except Exception as e:
            reason = e.message if isinstance(e, AppException) else str(e)
            logger.error(
                f"Ingestion stopped at chunk {index}/{len(chunks)} for document {document_id}: {reason}",
                exc_info=not isinstance(e, AppException),
            )
            raise PartialIngestionError(
                f"Failed to ingest document: chunk {index} could not be embedded or stored.",
                document_id=document_id,
                chunks_created=index,
            ) from e

        if (index + 1) % 10 == 0:
            logger.info(f"Embedded {index + 1}/{len(chunks)} chunks...")
    return len(chunks)


def query_documents(
    store: DocumentStore,
    embedder: EmbeddingClient,
    query: Optional[str],
    category: Optional[str] = None,
    insurance_provider: Optional[str] = None,
    match_count: Optional[int] = None,
    threshold: Optional[float] = None,
) -> QueryResult:
    """
    Embed ``query`` and return stored chunks ranked by similarity.

    An embedding failure propagates: a result set built on a broken query
    vector is meaningless.
    """
    _require(query=query)
    match_count = settings.rag.default_match_count if match_count is None else match_count
    threshold = settings.rag.default_threshold if threshold is None else threshold

    if not 1 <= match_count <= settings.rag.max_match_count:
        raise ValidationError(f"matchCount must be between 1 and {settings.rag.max_match_count}")
    if not 0.0 <= threshold <= 1.0:
        raise ValidationError("threshold must be between 0 and 1")

    start = time.perf_counter()
    query_embedding = embedder.embed(query)

    matches = store.search(
        query_embedding,
        threshold=threshold,
        limit=match_count,
        category=category,
        insurance_provider=insurance_provider,
    )
    matches = filter_matches(matches, category=category, insurance_provider=insurance_provider)
    matches = [m for m in matches if m.similarity >= threshold]
    matches.sort(key=lambda m: m.similarity, reverse=True)
    matches = matches[:match_count]

    elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
    logger.info(f"RAG query returned {len(matches)} matches in {elapsed_ms}ms")
    return QueryResult(
        results=matches,
        query=query,
        total_results=len(matches),
        processing_time=elapsed_ms,
    )


def filter_matches(
    matches: List[ChunkMatch],
    category: Optional[str] = None,
    insurance_provider: Optional[str] = None,
) -> List[ChunkMatch]:
    """Post-filter on returned metadata for stores that cannot filter natively."""
    def keep(match: ChunkMatch) -> bool:
        if category and category not in (match.document_type, match.metadata.get("category")):
            return False
        if insurance_provider and insurance_provider not in (
            match.insurance_provider,
            match.metadata.get("insurance_provider"),
        ):
            return False
        return True

    return [m for m in matches if keep(m)]


def build_context(matches: List[ChunkMatch]) -> str:
    """Join match texts into a prompt context block, best match first."""
    return "\n\n".join(
        f"[{m.document_title}] {m.text}" for m in sorted(matches, key=lambda m: m.similarity, reverse=True)
    )
