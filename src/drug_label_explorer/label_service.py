"""
Pass-through lookups on the drug label endpoint.

Each method builds a query, fetches, and reshapes the label records into the
compact per-drug summaries that tool callers consume.
"""
import logging
from typing import Any, Dict, List, Optional

from .labels import build_name_search, label_drug_name, label_manufacturer, section_list
from .models.responses import (
    AdverseReactionsRecord,
    AdverseReactionsResult,
    IndicationsRecord,
    IndicationsResult,
    LabelSearchResult,
    WarningsRecord,
    WarningsResult,
)
from .openfda_client import OpenFDAClient

logger = logging.getLogger("drug_label_explorer.service")


def _total(data: Dict[str, Any]) -> int:
    return data.get("meta", {}).get("results", {}).get("total", 0)


class DrugLabelService:
    """Drug label lookups backed by OpenFDAClient."""

    def __init__(self, client: Optional[OpenFDAClient] = None):
        self.client = client or OpenFDAClient()

    async def search_labels(
        self,
        search: Optional[str] = None,
        count: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> LabelSearchResult:
        """Raw label search; with `count` the results are term/count pairs."""
        data = await self.client.asearch_labels(search=search, count=count, skip=skip, limit=limit)
        results = data.get("results") or []
        return LabelSearchResult(meta=data.get("meta", {}), results_count=len(results), results=results)

    async def _labels_for_drug(self, drug_name: str, limit: int) -> Dict[str, Any]:
        data = await self.client.asearch_labels(search=build_name_search(drug_name), skip=0, limit=limit)
        logger.debug("Found %s labels for %r", len(data.get("results") or []), drug_name)
        return data

    async def get_adverse_reactions(self, drug_name: str, limit: int = 3) -> AdverseReactionsResult:
        data = await self._labels_for_drug(drug_name, limit)
        records: List[AdverseReactionsRecord] = [
            AdverseReactionsRecord(
                drug_name=label_drug_name(label),
                manufacturer=label_manufacturer(label),
                adverse_reactions=section_list(label, "adverse_reactions"),
                contraindications=section_list(label, "contraindications"),
            )
            for label in data.get("results") or []
        ]
        return AdverseReactionsResult(query=drug_name, total_results=_total(data), adverse_reactions_data=records)

    async def get_warnings(self, drug_name: str, limit: int = 3) -> WarningsResult:
        data = await self._labels_for_drug(drug_name, limit)
        records = [
            WarningsRecord(
                drug_name=label_drug_name(label),
                manufacturer=label_manufacturer(label),
                warnings=section_list(label, "warnings"),
                warnings_and_cautions=section_list(label, "warnings_and_cautions"),
                precautions=section_list(label, "precautions"),
                boxed_warning=section_list(label, "boxed_warning"),
            )
            for label in data.get("results") or []
        ]
        return WarningsResult(query=drug_name, total_results=_total(data), warnings_data=records)

    async def get_indications(self, drug_name: str, limit: int = 3) -> IndicationsResult:
        data = await self._labels_for_drug(drug_name, limit)
        records = [
            IndicationsRecord(
                drug_name=label_drug_name(label),
                manufacturer=label_manufacturer(label),
                indications_and_usage=section_list(label, "indications_and_usage"),
                dosage_and_administration=section_list(label, "dosage_and_administration"),
            )
            for label in data.get("results") or []
        ]
        return IndicationsResult(query=drug_name, total_results=_total(data), indications_data=records)
