"""
AE Pipeline Tool - One-call RAG over FDA drug labels for safety questions.
"""
import asyncio
from typing import Any, Dict, Optional, Type, Union

from langchain_core.tools import BaseTool, ToolException
from pydantic import BaseModel

from ...models.responses import AEPipelineRequest, PipelineFilters
from ...pipeline import AEPipeline, PipelineError


class AEPipelineRAGTool(BaseTool):
    name: str = "ae_pipeline_rag"
    description: str = """Advanced RAG pipeline for drug safety analysis. Fetches, extracts, chunks,
    retrieves and summarizes FDA drug label data in one call, so the response stays small.

    Parameters:
    - query: natural language safety question, e.g. 'cardiovascular side effects and warnings'
    - drug: drug name to focus on, e.g. 'ibuprofen'
    - condition: medical condition context, e.g. 'hypertension'
    - top_k: number of most relevant text chunks to return (1-10, default 5)
    - filters.limit: maximum drug labels to fetch (1-100, default 50)

    Provide at least a drug, a condition or a query."""
    args_schema: Type[BaseModel] = AEPipelineRequest

    _pipeline: AEPipeline

    def __init__(self, pipeline: Optional[AEPipeline] = None, **kwargs):
        super().__init__(**kwargs)
        self._pipeline = pipeline or AEPipeline()

    def _run(
        self,
        query: Optional[str] = None,
        drug: Optional[str] = None,
        condition: Optional[str] = None,
        top_k: int = 5,
        filters: Union[PipelineFilters, Dict[str, Any], None] = None,
    ) -> str:
        return asyncio.run(self._arun(query, drug, condition, top_k, filters))

    async def _arun(
        self,
        query: Optional[str] = None,
        drug: Optional[str] = None,
        condition: Optional[str] = None,
        top_k: int = 5,
        filters: Union[PipelineFilters, Dict[str, Any], None] = None,
    ) -> str:
        if isinstance(filters, PipelineFilters):
            filters = filters.model_dump()
        request = AEPipelineRequest(
            query=query,
            drug=drug,
            condition=condition,
            top_k=top_k,
            filters=filters or {},
        )
        try:
            result = await self._pipeline.run_request(request)
        except PipelineError as e:
            raise ToolException(str(e)) from e
        return result.to_payload()
