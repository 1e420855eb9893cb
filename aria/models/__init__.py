# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import rag_document, rag_embedding

# Explicit class exports for cleaner imports
from .rag_document import RagDocument
from .rag_embedding import RagEmbedding

__all__ = [
    "RagDocument",
    "RagEmbedding",
]
