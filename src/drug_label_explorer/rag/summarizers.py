"""
Template summaries of selected chunks, one template per data source.

Templates are registered by source tag; `summarize_chunks` looks the tag up
and falls back to the generic template for unknown sources. Every summary is
cut to max_length.
"""
import re
from typing import Callable, Dict, List, Optional, Sequence

from ..models.responses import TextChunk
from .citations import NCT_PATTERN, RXCUI_PATTERN

ATC_PATTERN = re.compile(r"[A-Z]\d{2}[A-Z]{2}\d{2}")

ELLIPSIS = "..."

SummaryTemplate = Callable[..., str]
SUMMARIZERS: Dict[str, SummaryTemplate] = {}


def register_summarizer(source: str) -> Callable[[SummaryTemplate], SummaryTemplate]:
    """Register a summary template for a source tag."""

    def decorator(func: SummaryTemplate) -> SummaryTemplate:
        SUMMARIZERS[source] = func
        return func

    return decorator


def _context_lines(
    query: Optional[str],
    drug: Optional[str],
    condition: Optional[str],
) -> List[str]:
    lines = []
    if drug:
        lines.append(f"**Drug**: {drug}")
    if condition:
        lines.append(f"**Condition**: {condition}")
    if query:
        lines.append(f"**Query**: {query}")
    return lines


def _previews(chunks: Sequence[TextChunk], count: int, max_chars: int) -> List[str]:
    lines = []
    for idx, chunk in enumerate(chunks[:count], 1):
        preview = chunk.text[:max_chars].replace("\n", " ")
        lines.append(f"{idx}. {preview}{ELLIPSIS}\n")
    return lines


def _mentions(text: str, terms: Sequence[str]) -> bool:
    return any(term in text for term in terms)


@register_summarizer("openfda")
def openfda_summary(
    chunks: Sequence[TextChunk],
    query: Optional[str] = None,
    drug: Optional[str] = None,
    condition: Optional[str] = None,
) -> str:
    lines = ["## FDA Drug Label Safety Information", ""]
    lines.extend(_context_lines(query, drug, condition))
    lines.append(f"**Sources**: {len(chunks)} FDA label excerpts")
    lines.append("")

    categories = {
        "warnings": 0,
        "adverse_reactions": 0,
        "contraindications": 0,
        "boxed_warning": 0,
    }
    for chunk in chunks:
        text = chunk.text.lower()
        if _mentions(text, ("warning", "警告")):
            categories["warnings"] += 1
        if _mentions(text, ("adverse", "不良反应")):
            categories["adverse_reactions"] += 1
        if _mentions(text, ("contraindication", "禁忌")):
            categories["contraindications"] += 1
        if _mentions(text, ("boxed", "黑框")):
            categories["boxed_warning"] += 1

    lines.append("### Safety Information by Category")
    lines.append(f"- Warnings: {categories['warnings']}")
    lines.append(f"- Adverse reactions: {categories['adverse_reactions']}")
    lines.append(f"- Contraindications: {categories['contraindications']}")
    lines.append(f"- Boxed warnings: {categories['boxed_warning']}")
    lines.append("")

    lines.append("### Key Safety Excerpts")
    lines.extend(_previews(chunks, 3, 200))
    return "\n".join(lines)


@register_summarizer("clinicaltrials")
def clinical_trials_summary(
    chunks: Sequence[TextChunk],
    query: Optional[str] = None,
    drug: Optional[str] = None,
    condition: Optional[str] = None,
) -> str:
    lines = ["## Clinical Trial Adverse Event Analysis", ""]
    lines.extend(_context_lines(query, drug, condition))
    lines.append(f"**Sources**: {len(chunks)} clinical trial excerpts")
    lines.append("")

    study_ids = set()
    adverse_terms = set()
    has_control_comparison = False
    ae_keywords = ("adverse", "side effect", "toxicity", "safety", "不良事件", "副作用")

    for chunk in chunks:
        study_ids.update(NCT_PATTERN.findall(chunk.text))
        text = chunk.text.lower()
        if _mentions(text, ("placebo", "control")):
            has_control_comparison = True
        adverse_terms.update(k for k in ae_keywords if k in text)

    lines.append("### Key Findings")
    lines.append(f"- Studies referenced: {len(study_ids)}")
    lines.append(f"- Control/placebo comparison: {'yes' if has_control_comparison else 'no'}")
    lines.append(f"- Adverse event content: {'yes' if adverse_terms else 'no'}")
    lines.append("")

    lines.append("### Evidence")
    lines.extend(_previews(chunks, 3, 200))

    lines.append("### Recommendation")
    lines.append(
        f"Based on {len(chunks)} relevant excerpts, review the individual studies "
        "for a complete safety assessment."
    )
    return "\n".join(lines)


@register_summarizer("rxnav")
def rxnav_summary(
    chunks: Sequence[TextChunk],
    query: Optional[str] = None,
    drug: Optional[str] = None,
    condition: Optional[str] = None,
) -> str:
    lines = ["## RxNav Drug Terminology", ""]
    lines.extend(_context_lines(query, drug, condition))
    lines.append(f"**Sources**: {len(chunks)} RxNav terminology excerpts")
    lines.append("")

    rxcuis = set()
    atc_codes = set()
    for chunk in chunks:
        rxcuis.update(RXCUI_PATTERN.findall(chunk.text))
        atc_codes.update(ATC_PATTERN.findall(chunk.text))

    lines.append("### Terminology Counts")
    lines.append(f"- RxCUI identifiers: {len(rxcuis)}")
    lines.append(f"- ATC classification codes: {len(atc_codes)}")
    lines.append("")

    lines.append("### Terminology Details")
    lines.extend(_previews(chunks, 3, 200))
    return "\n".join(lines)


def generic_summary(
    chunks: Sequence[TextChunk],
    query: Optional[str] = None,
    drug: Optional[str] = None,
    condition: Optional[str] = None,
) -> str:
    lines = ["## Summary", ""]
    lines.extend(_context_lines(query, drug, condition))
    lines.append(f"**Relevant excerpts**: {len(chunks)}")
    lines.append("")

    lines.append("### Main Content")
    lines.extend(_previews(chunks, 5, 150))
    return "\n".join(lines)


def truncate_summary(summary: str, max_length: int) -> str:
    if len(summary) <= max_length:
        return summary
    if max_length < len(ELLIPSIS):
        return summary[:max(max_length, 0)]
    return summary[: max_length - len(ELLIPSIS)] + ELLIPSIS


def summarize_chunks(
    chunks: Sequence[TextChunk],
    source: str,
    query: Optional[str] = None,
    drug: Optional[str] = None,
    condition: Optional[str] = None,
    max_length: int = 1200,
) -> str:
    """
    Build a bounded markdown summary of the selected chunks.

    Args:
        chunks: Ranked chunks to summarize
        source: Source tag selecting the template
        query, drug, condition: Context echoed in the header
        max_length: Hard upper bound on the returned length

    Returns:
        Summary of at most max_length characters
    """
    if not chunks:
        subject = query or drug or condition or "N/A"
        return truncate_summary(f"No relevant information found. Query: {subject}", max_length)

    template = SUMMARIZERS.get(source, generic_summary)
    summary = template(chunks, query=query, drug=drug, condition=condition)
    return truncate_summary(summary, max_length)
