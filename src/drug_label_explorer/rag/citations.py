"""
Citation extraction from selected chunks.

Structured identifiers (trial registry ids, RxNorm concept ids) are cited
directly; a chunk without any falls back to citing its source document.
"""
import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..models.responses import Citation, TextChunk

NCT_PATTERN = re.compile(r"NCT\d+")
RXCUI_PATTERN = re.compile(r"rxcui[\"\s:]+(\d+)", re.IGNORECASE)


def _nct_ids(text: str) -> Iterable[str]:
    return NCT_PATTERN.findall(text)


def _rxcui_ids(text: str) -> Iterable[str]:
    return RXCUI_PATTERN.findall(text)


# (extractor, citation type), applied in order to every chunk
IDENTIFIER_EXTRACTORS: List[Tuple[Callable[[str], Iterable[str]], str]] = [
    (_nct_ids, "clinical_trial"),
    (_rxcui_ids, "rxnorm"),
]


def _fallback_title(chunk: TextChunk) -> Optional[str]:
    return chunk.metadata.get("title") or chunk.metadata.get("drug_name")


def extract_citations(chunks: Sequence[TextChunk]) -> List[Citation]:
    """Collect citations from chunks in order, first occurrence of an id wins."""
    citations: List[Citation] = []
    seen_ids = set()

    for chunk in chunks:
        found_identifier = False

        for extractor, citation_type in IDENTIFIER_EXTRACTORS:
            for identifier in extractor(chunk.text):
                found_identifier = True
                if identifier not in seen_ids:
                    citations.append(Citation(id=identifier, type=citation_type))
                    seen_ids.add(identifier)

        if not found_identifier and chunk.source and chunk.source not in seen_ids:
            citations.append(
                Citation(
                    id=chunk.source,
                    type=chunk.metadata.get("type") or "document",
                    title=_fallback_title(chunk),
                )
            )
            seen_ids.add(chunk.source)

    return citations
