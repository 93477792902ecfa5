"""
Drug Label Tools - LLM-facing tools over FDA drug label data.
"""
from typing import List, Optional

from langchain_core.tools import BaseTool

from ...label_service import DrugLabelService
from ...pipeline import AEPipeline
from .ae_pipeline_tool import AEPipelineRAGTool
from .drug_section_tools import DrugAdverseReactionsTool, DrugIndicationsTool, DrugWarningsTool
from .label_search_tool import SearchDrugLabelsTool


def get_tools(
    service: Optional[DrugLabelService] = None,
    pipeline: Optional[AEPipeline] = None,
) -> List[BaseTool]:
    """All drug label tools, sharing one service and one pipeline."""
    service = service or DrugLabelService()
    return [
        SearchDrugLabelsTool(service=service),
        DrugAdverseReactionsTool(service=service),
        DrugWarningsTool(service=service),
        AEPipelineRAGTool(pipeline=pipeline),
        DrugIndicationsTool(service=service),
    ]


__all__ = [
    "AEPipelineRAGTool",
    "DrugAdverseReactionsTool",
    "DrugIndicationsTool",
    "DrugWarningsTool",
    "SearchDrugLabelsTool",
    "get_tools",
]
