"""
Drug Section Tools - Per-drug adverse reactions, warnings and indications.
"""
import asyncio
from typing import Optional, Type

from langchain_core.tools import BaseTool, ToolException
from pydantic import BaseModel

from ...label_service import DrugLabelService
from ...models.responses import DrugQueryParams


class _DrugSectionTool(BaseTool):
    """Shared plumbing: look a drug up by name and return one section group."""

    args_schema: Type[BaseModel] = DrugQueryParams
    section_label: str = "label sections"

    _service: DrugLabelService

    def __init__(self, service: Optional[DrugLabelService] = None, **kwargs):
        super().__init__(**kwargs)
        self._service = service or DrugLabelService()

    async def _lookup(self, drug_name: str, limit: int) -> BaseModel:
        raise NotImplementedError

    def _run(self, drug_name: str, limit: int = 3) -> str:
        return asyncio.run(self._arun(drug_name, limit))

    async def _arun(self, drug_name: str, limit: int = 3) -> str:
        try:
            result = await self._lookup(drug_name, limit)
        except Exception as e:
            raise ToolException(f"Error fetching {self.section_label} for '{drug_name}': {e}") from e
        return result.model_dump_json(indent=2)


class DrugAdverseReactionsTool(_DrugSectionTool):
    name: str = "get_drug_adverse_reactions"
    description: str = "Get adverse reactions and contraindications for a specific drug from FDA labels"
    section_label: str = "adverse reactions"

    async def _lookup(self, drug_name: str, limit: int) -> BaseModel:
        return await self._service.get_adverse_reactions(drug_name, limit)


class DrugWarningsTool(_DrugSectionTool):
    name: str = "get_drug_warnings"
    description: str = "Get warnings, precautions and boxed warnings for a specific drug from FDA labels"
    section_label: str = "warnings"

    async def _lookup(self, drug_name: str, limit: int) -> BaseModel:
        return await self._service.get_warnings(drug_name, limit)


class DrugIndicationsTool(_DrugSectionTool):
    name: str = "get_drug_indications"
    description: str = "Get indications and usage information for a specific drug from FDA labels"
    section_label: str = "indications"

    async def _lookup(self, drug_name: str, limit: int) -> BaseModel:
        return await self._service.get_indications(drug_name, limit)
