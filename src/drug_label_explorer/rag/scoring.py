"""
Lexical relevance scoring and top-K selection.

Score = sum over keyword hits of log(1 + len(keyword)), plus a bonus of
2 * len(query) when the whole query appears verbatim, divided by
sqrt(len(text)) so long chunks do not win on length alone.
"""
import math
from typing import Iterable, List, Sequence

from ..models.responses import TextChunk

MIN_KEYWORD_LENGTH = 2
PHRASE_BONUS_PER_CHAR = 2


def _keywords(query: str, extra_keywords: Iterable[str]) -> List[str]:
    candidates = query.lower().split() + [k.lower() for k in extra_keywords]
    return [k for k in candidates if len(k) > MIN_KEYWORD_LENGTH]


def score_chunk(chunk: TextChunk, query: str, extra_keywords: Iterable[str] = ()) -> float:
    """Score one chunk against a query; higher is more relevant."""
    text = chunk.text.lower()
    if not text:
        return 0.0

    query_lower = query.lower()
    score = 0.0

    for keyword in _keywords(query, extra_keywords):
        matches = text.count(keyword)
        if matches:
            score += matches * math.log(1 + len(keyword))

    if query_lower and query_lower in text:
        score += len(query_lower) * PHRASE_BONUS_PER_CHAR

    return score / math.sqrt(len(text))


def rank_and_pick_top(
    chunks: Sequence[TextChunk],
    query: str,
    top_k: int = 5,
    extra_keywords: Iterable[str] = (),
) -> List[TextChunk]:
    """
    Score every chunk and return the top_k best as scored copies.

    Ties keep their input order.
    """
    if top_k <= 0 or not chunks:
        return []

    extra_keywords = list(extra_keywords)
    scored = [
        chunk.model_copy(update={"score": score_chunk(chunk, query, extra_keywords)})
        for chunk in chunks
    ]
    # sorted() is stable, also with reverse=True
    scored = sorted(scored, key=lambda c: c.score, reverse=True)
    return scored[:top_k]
