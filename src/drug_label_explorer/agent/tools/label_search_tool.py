"""
Label Search Tool - Raw search over FDA drug labels.
"""
import asyncio
from typing import Optional, Type

from langchain_core.tools import BaseTool, ToolException
from pydantic import BaseModel

from ...label_service import DrugLabelService
from ...models.responses import DrugLabelSearchParams


class SearchDrugLabelsTool(BaseTool):
    name: str = "search_drug_labels"
    description: str = """Search FDA drug labels using the OpenFDA API. Returns drug labeling information
    including indications, contraindications, warnings, and adverse reactions.

    Parameters:
    - search: openFDA query, e.g. 'aspirin' or 'openfda.brand_name:tylenol'
    - count: field to count by instead of returning records, e.g. 'openfda.manufacturer_name.exact'
    - skip / limit: pagination (limit 1-200)"""
    args_schema: Type[BaseModel] = DrugLabelSearchParams

    _service: DrugLabelService

    def __init__(self, service: Optional[DrugLabelService] = None, **kwargs):
        super().__init__(**kwargs)
        self._service = service or DrugLabelService()

    def _run(self, search: Optional[str] = None, count: Optional[str] = None, skip: int = 0, limit: int = 50) -> str:
        return asyncio.run(self._arun(search, count, skip, limit))

    async def _arun(self, search: Optional[str] = None, count: Optional[str] = None, skip: int = 0, limit: int = 50) -> str:
        try:
            result = await self._service.search_labels(search=search, count=count, skip=skip, limit=limit)
        except Exception as e:
            raise ToolException(f"Error searching drug labels: {e}") from e
        return result.model_dump_json(indent=2)
