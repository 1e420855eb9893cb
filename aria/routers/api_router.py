from fastapi import APIRouter
from aria.routers import admin_rag, assessment, embeddings, generation, rag

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(rag.router, tags=["RAG"])
api_router.include_router(admin_rag.router, tags=["RAG Administration"])
api_router.include_router(embeddings.router, tags=["Embeddings"])
api_router.include_router(generation.router, tags=["AI Generation"])
api_router.include_router(assessment.router, tags=["Assessment Wizard"])
