from fastapi import APIRouter, Depends, Request
import logging

from aria.core.config import settings
from aria.core.limiter import limiter
from aria.schemas.generation import (
    BehaviorSuggestionRequest,
    BehaviorSuggestionResponse,
    ComplianceChatRequest,
    ComplianceChatResponse,
    GenerateContentRequest,
    GenerateContentResponse,
    TargetDateRequest,
    TargetDateResponse,
)
from aria.services import generation_ai
from aria.services.compliance_ai import compliance_chat
from aria.services.document_store import DocumentStore, get_document_store
from aria.services.embedding_service import EmbeddingClient, get_embedding_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generation"])


@router.post("/generate-content", response_model=GenerateContentResponse)
@limiter.limit(settings.generation_rate_limit)
def generate_content(request: Request, payload: GenerateContentRequest):
    """Draft a report section. Model failures surface as errors."""
    return generation_ai.generate_content(payload.type, payload.data)


@router.post("/suggest-target-date", response_model=TargetDateResponse, response_model_exclude_none=True)
@limiter.limit(settings.generation_rate_limit)
def suggest_target_date(request: Request, payload: TargetDateRequest):
    """Realistic target date for a goal; falls back to six months out."""
    return generation_ai.suggest_target_date(payload.model_dump(by_alias=True))


@router.post("/suggest-behaviors", response_model=BehaviorSuggestionResponse)
@limiter.limit(settings.generation_rate_limit)
def suggest_behaviors(request: Request, payload: BehaviorSuggestionRequest):
    suggestions = generation_ai.suggest_behaviors(
        payload.deficits,
        payload.domain_scores,
        payload.available_behaviors,
    )
    return {"suggestions": suggestions}


@router.post("/compliance-chat", response_model=ComplianceChatResponse)
@limiter.limit(settings.generation_rate_limit)
def chat(
    request: Request,
    payload: ComplianceChatRequest,
    store: DocumentStore = Depends(get_document_store),
    embedder: EmbeddingClient = Depends(get_embedding_client),
):
    """Short compliance answers grounded on the knowledge base when possible."""
    return compliance_chat(store, embedder, payload.messages, category=payload.category)
