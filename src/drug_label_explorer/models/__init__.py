from .responses import (
    AdverseReactionsRecord,
    AdverseReactionsResult,
    AEPipelineRequest,
    Citation,
    DrugLabelSearchParams,
    DrugQueryParams,
    IndicationsRecord,
    IndicationsResult,
    LabelSearchResult,
    PipelineFilters,
    RAGResult,
    TextChunk,
    WarningsRecord,
    WarningsResult,
)

__all__ = [
    "AdverseReactionsRecord",
    "AdverseReactionsResult",
    "AEPipelineRequest",
    "Citation",
    "DrugLabelSearchParams",
    "DrugQueryParams",
    "IndicationsRecord",
    "IndicationsResult",
    "LabelSearchResult",
    "PipelineFilters",
    "RAGResult",
    "TextChunk",
    "WarningsRecord",
    "WarningsResult",
]
