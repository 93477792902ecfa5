"""
Structured request/response models for the drug label tools.

These models provide typed, structured data that can be:
1. Serialized to JSON as a single text payload for tool callers
2. Validated from loosely-typed tool arguments (numeric strings are coerced)
3. Returned from the REST API inside the standard response envelope
"""
from typing import Any, Optional

from pydantic import BaseModel, Field


class TextChunk(BaseModel):
    """A bounded slice of a label's text, individually scorable and citable."""
    id: str = Field(description="Unique within its source: '<source>_chunk_<index>'")
    text: str
    source: str = Field(description="Identifier of the originating document")
    metadata: dict[str, Any] = Field(default_factory=dict)
    score: Optional[float] = Field(default=None, description="Relevance score, set by the ranker")


class Citation(BaseModel):
    id: str
    title: Optional[str] = None
    type: Optional[str] = None


class RAGResult(BaseModel):
    """Result bundle of one pipeline invocation."""
    source: str
    query: Optional[str] = None
    drug: Optional[str] = None
    condition: Optional[str] = None
    top_chunks: list[TextChunk] = Field(default_factory=list)
    summary: str
    citations: list[Citation] = Field(default_factory=list)

    def to_payload(self) -> str:
        """Serialize as the single JSON text payload returned to tool callers."""
        return self.model_dump_json(indent=2, exclude_none=True)


class PipelineFilters(BaseModel):
    limit: int = Field(default=50, ge=1, le=100, description="Maximum drug labels to fetch")


class AEPipelineRequest(BaseModel):
    """Arguments of the adverse-event RAG pipeline."""
    query: Optional[str] = Field(
        default=None,
        description="Natural language query about drug safety. Example: 'cardiovascular side effects and warnings'",
    )
    drug: Optional[str] = Field(
        default=None,
        description="Drug name to focus the analysis on. Example: 'aspirin', 'ibuprofen'",
    )
    condition: Optional[str] = Field(
        default=None,
        description="Medical condition context. Example: 'hypertension', 'pain management'",
    )
    top_k: int = Field(default=5, ge=1, le=10, description="Number of most relevant text chunks to return (1-10)")
    filters: PipelineFilters = Field(default_factory=PipelineFilters, description="Additional filters for data retrieval")


class DrugLabelSearchParams(BaseModel):
    search: Optional[str] = Field(
        default=None,
        description="Search query. Can search by drug name, active ingredient, manufacturer, etc. "
        "Example: 'aspirin', 'openfda.brand_name:tylenol'",
    )
    count: Optional[str] = Field(
        default=None,
        description="Field to count results by. Example: 'openfda.manufacturer_name.exact'",
    )
    skip: int = Field(default=0, ge=0, description="Number of records to skip (for pagination)")
    limit: int = Field(default=50, ge=1, le=200, description="Maximum number of records to return")


class DrugQueryParams(BaseModel):
    drug_name: str = Field(description="Name of the drug to look up")
    limit: int = Field(default=3, ge=1, le=10, description="Maximum number of labels to return")


class LabelSearchResult(BaseModel):
    meta: dict[str, Any] = Field(default_factory=dict)
    results_count: int
    results: list[dict[str, Any]] = Field(default_factory=list)


class AdverseReactionsRecord(BaseModel):
    drug_name: str
    manufacturer: str
    adverse_reactions: list[str] = Field(default_factory=list)
    contraindications: list[str] = Field(default_factory=list)


class WarningsRecord(BaseModel):
    drug_name: str
    manufacturer: str
    warnings: list[str] = Field(default_factory=list)
    warnings_and_cautions: list[str] = Field(default_factory=list)
    precautions: list[str] = Field(default_factory=list)
    boxed_warning: list[str] = Field(default_factory=list)


class IndicationsRecord(BaseModel):
    drug_name: str
    manufacturer: str
    indications_and_usage: list[str] = Field(default_factory=list)
    dosage_and_administration: list[str] = Field(default_factory=list)


class AdverseReactionsResult(BaseModel):
    query: str
    total_results: int
    adverse_reactions_data: list[AdverseReactionsRecord] = Field(default_factory=list)


class WarningsResult(BaseModel):
    query: str
    total_results: int
    warnings_data: list[WarningsRecord] = Field(default_factory=list)


class IndicationsResult(BaseModel):
    query: str
    total_results: int
    indications_data: list[IndicationsRecord] = Field(default_factory=list)
