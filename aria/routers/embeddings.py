from fastapi import APIRouter, Depends

from aria.schemas.rag import EmbeddingRequest, EmbeddingResponse
from aria.services.embedding_service import EmbeddingClient, get_embedding_client

router = APIRouter(tags=["embeddings"])


@router.post("/embeddings", response_model=EmbeddingResponse)
def create_embedding(
    request: EmbeddingRequest,
    embedder: EmbeddingClient = Depends(get_embedding_client),
):
    """
    Embedding for typing assistance. Always 200: a missing embedding is
    returned as null so the caller's workflow continues.
    """
    if not isinstance(request.text, str) or not request.text.strip():
        return EmbeddingResponse(embedding=None)
    return EmbeddingResponse(embedding=embedder.embed_or_none(request.text))
