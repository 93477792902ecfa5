"""
Sentence-aware text chunking for label documents.

Windows are cut at a fixed size and pulled back to the last sentence end or
line break when that keeps most of the window, so chunks rarely split a
sentence. Consecutive chunks overlap so a fact straddling a cut still appears
whole in at least one chunk.
"""
from typing import Any, Dict, List, Optional

from ..models.responses import TextChunk

# A boundary snap may only shorten a window down to this share of chunk_size.
BOUNDARY_RETENTION = 0.7
BREAK_CHARS = (".", "\n")


def _last_break(window: str) -> int:
    return max(window.rfind(ch) for ch in BREAK_CHARS)


def chunk_text(
    text: Optional[str],
    chunk_size: int = 1000,
    overlap: int = 200,
    source_id: str = "",
    metadata: Optional[Dict[str, Any]] = None,
) -> List[TextChunk]:
    """
    Split text into overlapping, sentence-aware chunks.

    Args:
        text: Text to split; empty or None yields no chunks
        chunk_size: Maximum characters per chunk
        overlap: Characters shared by consecutive chunks (must be < chunk_size)
        source_id: Document identifier, used as chunk source and id prefix
        metadata: Provenance merged into every chunk's metadata

    Returns:
        Chunks in document order. Each chunk's text equals
        text[metadata["start"]:metadata["end"]].
    """
    if overlap < 0 or chunk_size <= overlap:
        raise ValueError(f"chunk_size ({chunk_size}) must be greater than overlap ({overlap}) >= 0")
    if not text:
        return []

    base_metadata = dict(metadata or {})
    text_length = len(text)
    chunks: List[TextChunk] = []
    start = 0
    chunk_index = 0

    while start < text_length:
        end = min(start + chunk_size, text_length)
        window = text[start:end]

        if end < text_length:
            break_point = _last_break(window)
            if break_point > chunk_size * BOUNDARY_RETENTION:
                window = window[: break_point + 1]

        chunk_end = start + len(window)
        chunks.append(
            TextChunk(
                id=f"{source_id}_chunk_{chunk_index}",
                text=window,
                source=source_id,
                metadata={**base_metadata, "chunk_index": chunk_index, "start": start, "end": chunk_end},
            )
        )
        chunk_index += 1

        if chunk_end >= text_length:
            break

        next_start = chunk_end - overlap
        if next_start <= start:
            # Overlap swallowed the whole advance; resume where this chunk ended.
            next_start = chunk_end
        start = next_start

    return chunks
