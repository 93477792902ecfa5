"""
Lexical RAG utilities for drug label text.

Chunk label text, rank chunks against a query, summarize the winners with a
source-specific template and cite what they reference.
"""
from .chunking import chunk_text
from .citations import extract_citations
from .scoring import rank_and_pick_top, score_chunk
from .summarizers import SUMMARIZERS, register_summarizer, summarize_chunks

__all__ = [
    "chunk_text",
    "extract_citations",
    "rank_and_pick_top",
    "score_chunk",
    "SUMMARIZERS",
    "register_summarizer",
    "summarize_chunks",
]
