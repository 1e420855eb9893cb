import logging
from typing import Any, Dict, List, Optional

from aria.core import prompts
from aria.core.config import settings
from aria.core.exceptions import AppException, ValidationError
from aria.services.ai_orchestrator import AIDomain, AIOrchestrator
from aria.services.document_store import DocumentStore
from aria.services.embedding_service import EmbeddingClient
from aria.services.rag_service import build_context, query_documents

logger = logging.getLogger(__name__)

CHAT_ROLES = {"user", "assistant"}


def clean_messages(messages: Any) -> List[Dict[str, str]]:
    """Drop malformed or blank turns."""
    if not isinstance(messages, list):
        raise ValidationError("Invalid messages format")
    valid = [
        {"role": m["role"], "content": m["content"].strip()}
        for m in messages
        if isinstance(m, dict)
        and m.get("role") in CHAT_ROLES
        and isinstance(m.get("content"), str)
        and m["content"].strip()
    ]
    if not valid:
        raise ValidationError("No valid messages provided")
    return valid


def compliance_chat(
    store: DocumentStore,
    embedder: EmbeddingClient,
    messages: Any,
    category: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Answer a compliance question, grounding on the knowledge base when it has
    something relevant. Context lookup is best-effort; the model call is not.
    """
    history = clean_messages(messages)
    question = next((m["content"] for m in reversed(history) if m["role"] == "user"), "")

    sources = []
    system = prompts.COMPLIANCE_SYSTEM
    if question:
        try:
            result = query_documents(
                store,
                embedder,
                question,
                category=category,
                match_count=settings.rag.context_match_count,
                threshold=settings.rag.context_threshold,
            )
            if result.results:
                context = build_context(result.results)
                system = f"{system}\n\n{prompts.COMPLIANCE_CONTEXT_TEMPLATE.format(context=context)}"
                sources = [
                    {
                        "documentId": m.document_id,
                        "documentTitle": m.document_title,
                        "similarity": round(m.similarity, 4),
                    }
                    for m in result.results
                ]
        except Exception as e:
            reason = e.message if isinstance(e, AppException) else str(e)
            logger.warning(
                f"Compliance context lookup failed, answering without it: {reason}",
                exc_info=not isinstance(e, AppException),
            )
            sources = []
            system = prompts.COMPLIANCE_SYSTEM

    content = AIOrchestrator.call_model(
        history,
        system=system,
        max_tokens=250,
        domain=AIDomain.COMPLIANCE
    )
    return {"success": True, "content": content, "sources": sources}
