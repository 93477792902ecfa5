from .tools import (
    AEPipelineRAGTool,
    DrugAdverseReactionsTool,
    DrugIndicationsTool,
    DrugWarningsTool,
    SearchDrugLabelsTool,
    get_tools,
)

__all__ = [
    "AEPipelineRAGTool",
    "DrugAdverseReactionsTool",
    "DrugIndicationsTool",
    "DrugWarningsTool",
    "SearchDrugLabelsTool",
    "get_tools",
]
