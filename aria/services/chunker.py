import enum
import logging
import re
from typing import List

logger = logging.getLogger(__name__)

# Split after terminal punctuation followed by whitespace
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


class ChunkingStrategy(str, enum.Enum):
    FIXED_WINDOW = "fixed_window"
    SENTENCE = "sentence"


def chunk_text(
    text: str,
    strategy: ChunkingStrategy = ChunkingStrategy.SENTENCE,
    max_length: int = 2000,
    overlap: int = 0,
) -> List[str]:
    """
    Split text into ordered, non-empty chunks.

    Args:
        text: Raw document text
        strategy: FIXED_WINDOW slides a window of ``max_length`` characters
            forward by ``max_length - overlap``; SENTENCE packs whole sentences
            up to ``max_length`` (a single long sentence is never split)
        max_length: Upper bound on chunk length
        overlap: Characters shared by consecutive windows (FIXED_WINDOW only)

    Returns:
        List of chunks; empty for blank input
    """
    strategy = ChunkingStrategy(strategy)
    if max_length <= 0:
        raise ValueError("max_length must be positive")

    if not text or not text.strip():
        return []

    if len(text) <= max_length:
        return [text.strip()]

    if strategy == ChunkingStrategy.FIXED_WINDOW:
        chunks = fixed_window_chunks(text, max_length, overlap)
    else:
        chunks = sentence_chunks(text, max_length)

    logger.info(f"Chunking complete - {len(chunks)} chunks from {len(text)} chars ({strategy.value})")
    return chunks


def fixed_window_chunks(text: str, chunk_size: int, overlap: int) -> List[str]:
    """
    Raw character windows; chunk[0] + chunk[i][overlap:] rebuilds the text.

    Windows holding only whitespace are dropped, since an empty chunk has
    nothing to embed. Text containing a whitespace run at least one window
    long therefore does not rebuild exactly: the run is lost.
    """
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError("overlap must be >= 0 and smaller than chunk_size")

    step = chunk_size - overlap
    chunks = []
    start = 0
    while start < len(text):
        end = min(start + chunk_size, len(text))
        window = text[start:end]
        if window.strip():
            chunks.append(window)
        if end == len(text):
            break
        start += step
    return chunks


def sentence_chunks(text: str, max_length: int) -> List[str]:
    chunks = []
    current = ""

    for sentence in SENTENCE_BOUNDARY.split(text.strip()):
        sentence = sentence.strip()
        if not sentence:
            continue
        candidate = f"{current} {sentence}" if current else sentence
        if current and len(candidate) > max_length:
            chunks.append(current)
            current = sentence
        else:
            current = candidate

    if current:
        chunks.append(current)
    return chunks
