"""
Drug label helpers: field access, text extraction and search construction.

Also defines the document-fetch boundary used by the RAG pipeline: any object
with an async ``fetch(search, skip, limit)`` returning a FetchResult.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from .openfda_client import OpenFDAClient

UNKNOWN = "Unknown"

# Extraction order, most clinically relevant sections first after usage.
LABEL_SECTIONS = [
    ("indications_and_usage", "INDICATIONS AND USAGE"),
    ("dosage_and_administration", "DOSAGE AND ADMINISTRATION"),
    ("contraindications", "CONTRAINDICATIONS"),
    ("warnings", "WARNINGS"),
    ("warnings_and_cautions", "WARNINGS AND CAUTIONS"),
    ("boxed_warning", "BOXED WARNING"),
    ("precautions", "PRECAUTIONS"),
    ("adverse_reactions", "ADVERSE REACTIONS"),
    ("drug_interactions", "DRUG INTERACTIONS"),
]

NAME_FIELDS = ("openfda.brand_name", "openfda.generic_name", "openfda.substance_name")
MIN_QUERY_WORD_LENGTH = 2


@dataclass
class FetchResult:
    """Documents returned by one fetch plus the upstream total."""
    documents: List[Dict[str, Any]] = field(default_factory=list)
    total_count: int = 0


class LabelFetcher(Protocol):
    async def fetch(self, search: str, skip: int = 0, limit: int = 50) -> FetchResult:
        ...


class OpenFDALabelFetcher:
    """Fetch label records from the openFDA drug label endpoint."""

    def __init__(self, client: Optional[OpenFDAClient] = None):
        self.client = client or OpenFDAClient()

    async def fetch(self, search: str, skip: int = 0, limit: int = 50) -> FetchResult:
        data = await self.client.asearch_labels(search=search, skip=skip, limit=limit)
        total = data.get("meta", {}).get("results", {}).get("total", 0)
        return FetchResult(documents=data.get("results") or [], total_count=total)


def _first(label: Dict[str, Any], key: str) -> Optional[str]:
    values = (label.get("openfda") or {}).get(key) or []
    return values[0] if values else None


def label_drug_name(label: Dict[str, Any], default: str = UNKNOWN) -> str:
    return _first(label, "brand_name") or _first(label, "generic_name") or default


def label_manufacturer(label: Dict[str, Any], default: Optional[str] = UNKNOWN) -> Optional[str]:
    return _first(label, "manufacturer_name") or default


def label_id(label: Dict[str, Any]) -> str:
    """Stable label identifier, or a random one for records without ids."""
    return label.get("id") or _first(label, "spl_id") or f"label_{uuid.uuid4().hex[:9]}"


def section_list(label: Dict[str, Any], section: str) -> List[str]:
    """Section content as a list of strings (openFDA mostly uses lists)."""
    value = label.get(section)
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value if item]


def extract_label_text(label: Dict[str, Any]) -> str:
    """
    Concatenate a label's known sections into one text blob.

    Returns an empty string when none of the known sections has content.
    """
    parts = []
    for section, title in LABEL_SECTIONS:
        content = section_list(label, section)
        if content:
            parts.append(f"=== {title} ===")
            parts.append("\n".join(content))

    if not parts:
        return ""

    header = [
        f"Drug: {label_drug_name(label, 'Unknown Drug')}",
        f"Manufacturer: {label_manufacturer(label, 'Unknown Manufacturer')}",
    ]
    return "\n\n".join(header + parts)


def label_metadata(label: Dict[str, Any]) -> Dict[str, Any]:
    """Provenance attached to every chunk cut from this label."""
    return {
        "drug_name": label_drug_name(label, "Unknown Drug"),
        "manufacturer": label_manufacturer(label, None),
        "type": "fda_label",
        "has_warnings": bool(
            label.get("warnings") or label.get("warnings_and_cautions") or label.get("boxed_warning")
        ),
        "has_boxed_warning": bool(label.get("boxed_warning")),
        "has_adverse_reactions": bool(label.get("adverse_reactions")),
    }


def _quote(value: str) -> str:
    return value.replace('"', '\\"')


def build_name_search(drug_name: str) -> str:
    """Match a drug by brand, generic or substance name."""
    safe_name = _quote(drug_name.strip())
    return "(" + " OR ".join(f'{name_field}:"{safe_name}"' for name_field in NAME_FIELDS) + ")"


def build_rag_search(
    query: Optional[str] = None,
    drug: Optional[str] = None,
    condition: Optional[str] = None,
) -> Optional[str]:
    """
    Combine the optional context fields into one openFDA search expression.

    Returns None when no field contributes a term.
    """
    terms = []
    if drug and drug.strip():
        terms.append(build_name_search(drug))
    if condition and condition.strip():
        terms.append(f'indications_and_usage:"{_quote(condition.strip())}"')
    if query:
        # Free-text words go out unquoted, so a stray quote would break the search.
        words = [w for w in query.replace('"', " ").split() if len(w) > MIN_QUERY_WORD_LENGTH]
        if words:
            terms.append(" AND ".join(words))

    if not terms:
        return None
    return " AND ".join(terms)
