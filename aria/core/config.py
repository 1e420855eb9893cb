import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

class AISettings(BaseModel):
    anthropic_api_key: Optional[str] = Field(default=os.getenv("ANTHROPIC_API_KEY"))
    api_url: str = os.getenv("ANTHROPIC_API_URL", "https://api.anthropic.com/v1/messages")
    api_version: str = "2023-06-01"
    model_name: str = Field(default=os.getenv("AI_MODEL_NAME", "claude-sonnet-4-20250514"))
    fallback_model: str = Field(default=os.getenv("AI_FALLBACK_MODEL", "claude-3-5-haiku-20241022"))
    kill_switch: bool = Field(default=os.getenv("AI_KILL_SWITCH", "false").lower() == "true")
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout: int = 45

class EmbeddingSettings(BaseModel):
    openai_api_key: Optional[str] = Field(default=os.getenv("OPENAI_API_KEY"))
    api_url: str = os.getenv("EMBEDDINGS_API_URL", "https://api.openai.com/v1/embeddings")
    model: str = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
    max_chars: int = int(os.getenv("EMBEDDING_MAX_CHARS", "8000"))
    timeout: int = 30

class RAGSettings(BaseModel):
    # Single-shot ingestion keeps whole sentences together
    ingest_strategy: str = os.getenv("RAG_INGEST_STRATEGY", "sentence")
    ingest_max_length: int = int(os.getenv("RAG_INGEST_MAX_LENGTH", "2000"))
    ingest_overlap: int = 0

    # Two-step admin flow uses a sliding window
    admin_strategy: str = os.getenv("RAG_ADMIN_STRATEGY", "fixed_window")
    admin_chunk_size: int = int(os.getenv("RAG_ADMIN_CHUNK_SIZE", "500"))
    admin_overlap: int = int(os.getenv("RAG_ADMIN_OVERLAP", "50"))

    default_threshold: float = 0.7
    default_match_count: int = 5
    max_match_count: int = 50

    # Compliance chat context lookup
    context_threshold: float = 0.7
    context_match_count: int = 3

class Config(BaseModel):
    app_name: str = "ARIA Assessment Platform"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./aria.db")

    # AI Components
    ai: AISettings = AISettings()
    embeddings: EmbeddingSettings = EmbeddingSettings()
    rag: RAGSettings = RAGSettings()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # CORS — comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

    # Per-IP window applied to the generation endpoints
    generation_rate_limit: str = os.getenv("GENERATION_RATE_LIMIT", "10/minute")
    rate_limit_storage_uri: str = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")

settings = Config()

# --- Startup Validation ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    _missing = []
    if not settings.ai.anthropic_api_key:
        _missing.append("ANTHROPIC_API_KEY")
    if not settings.embeddings.openai_api_key:
        _missing.append("OPENAI_API_KEY")
    if _missing:
        _logger.warning(
            f"Missing provider credentials: {', '.join(_missing)}. "
            "AI generation and RAG endpoints will return errors until they are set."
        )
