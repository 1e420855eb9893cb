from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while keeping snake_case attributes."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChunkMatch(CamelModel):
    id: str
    text: str
    similarity: float
    document_id: str
    document_title: str
    document_type: str
    insurance_provider: Optional[str] = None
    chunk_index: int
    metadata: Dict[str, Any] = Field(default_factory=dict)


# Required fields default to empty so the service layer can answer a missing
# field with a 400 rather than a schema error.
class IngestRequest(CamelModel):
    title: Optional[str] = ""
    content: Optional[str] = ""
    category: Optional[str] = ""
    metadata: Optional[Dict[str, Any]] = None
    insurance_provider: Optional[str] = None


class IngestResponse(CamelModel):
    success: bool = True
    document_id: str
    chunks_created: int


class QueryRequest(CamelModel):
    query: Optional[str] = ""
    category: Optional[str] = None
    insurance_provider: Optional[str] = None
    match_count: int = 5
    threshold: float = 0.7


class QueryResponse(CamelModel):
    success: bool = True
    results: List[ChunkMatch]
    query: str
    total_results: int
    processing_time: float


class DatabaseHealth(CamelModel):
    connected: bool
    documents_count: int = 0
    embeddings_count: int = 0


class HealthResponse(CamelModel):
    status: str
    database: DatabaseHealth
    version: str


class CreateDocumentRequest(CamelModel):
    title: Optional[str] = ""
    content: Optional[str] = ""
    type: Optional[str] = ""
    provider: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class CreateDocumentResponse(CamelModel):
    document_id: str
    title: str


class DocumentSummary(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    title: str
    document_type: str
    insurance_provider: Optional[str] = None
    created_at: Optional[datetime] = None
    chunk_count: int = 0


class ChunkRecord(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    document_id: str
    chunk_index: int
    chunk_text: str


class EmbeddingRequest(BaseModel):
    text: Optional[Any] = None


class EmbeddingResponse(BaseModel):
    embedding: Optional[List[float]] = None
