"""
Adverse-event RAG pipeline over FDA drug labels.

Fetches labels for the caller's context, chunks them, ranks all chunks
against the query in one pool, and returns a bounded summary with the top
chunks and their citations. One call produces one self-contained RAGResult,
sized for an LLM tool response.
"""
import logging
import time
from typing import List, Optional

from .config import RAGConfig, get_config
from .labels import LabelFetcher, OpenFDALabelFetcher, build_rag_search, extract_label_text, label_id, label_metadata
from .models.responses import AEPipelineRequest, RAGResult, TextChunk
from .rag import chunk_text, extract_citations, rank_and_pick_top, summarize_chunks

logger = logging.getLogger("drug_label_explorer.pipeline")

# Safety terms (English and Chinese) that lift label chunks about risk.
SAFETY_BOOST_KEYWORDS = [
    "adverse reactions",
    "side effects",
    "warnings",
    "contraindications",
    "boxed warning",
    "precautions",
    "safety",
    "toxicity",
    "不良反应",
    "副作用",
    "警告",
    "禁忌症",
    "安全性",
]

MISSING_CRITERIA_MESSAGE = "Please provide a drug name or a specific query to retrieve FDA label information."
NO_MATCH_MESSAGE = "No matching FDA drug label data found. Try adjusting the search criteria."


class PipelineError(Exception):
    """The pipeline could not produce a result (upstream or internal failure)."""


class AEPipeline:
    """Fetch → chunk → rank → summarize → cite, for one request at a time."""

    def __init__(
        self,
        fetcher: Optional[LabelFetcher] = None,
        rag_config: Optional[RAGConfig] = None,
        boost_keywords: Optional[List[str]] = None,
    ):
        self.fetcher = fetcher or OpenFDALabelFetcher()
        self.config = rag_config or get_config().rag
        self.boost_keywords = list(boost_keywords) if boost_keywords is not None else list(SAFETY_BOOST_KEYWORDS)

    @property
    def source(self) -> str:
        return self.config.source

    async def run_request(self, request: AEPipelineRequest) -> RAGResult:
        return await self.run(
            query=request.query,
            drug=request.drug,
            condition=request.condition,
            top_k=request.top_k,
            limit=request.filters.limit,
        )

    async def run(
        self,
        query: Optional[str] = None,
        drug: Optional[str] = None,
        condition: Optional[str] = None,
        top_k: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> RAGResult:
        """
        Run the pipeline for one set of context fields.

        Raises:
            PipelineError: if fetching fails or an internal step raises
        """
        top_k = top_k if top_k is not None else self.config.default_top_k
        limit = limit if limit is not None else self.config.default_fetch_limit

        search = build_rag_search(query=query, drug=drug, condition=condition)
        if not search:
            logger.info("No search criteria supplied; skipping fetch")
            return self._empty_result(MISSING_CRITERIA_MESSAGE, query, drug, condition)

        started = time.perf_counter()
        try:
            fetched = await self.fetcher.fetch(search, skip=0, limit=limit)
        except Exception as e:
            logger.error(f"Label fetch failed for search={search!r}: {e}")
            raise PipelineError(f"RAG pipeline failed: {e}") from e

        if not fetched.documents:
            logger.info("No labels matched search=%r", search)
            return self._empty_result(NO_MATCH_MESSAGE, query, drug, condition)

        try:
            result = self._assemble(fetched.documents, query, drug, condition, top_k)
        except Exception as e:
            logger.exception("RAG pipeline failed while processing labels")
            raise PipelineError(f"RAG pipeline failed: {e}") from e

        logger.info(
            "RAG pipeline: %s labels (total %s) -> %s chunks, %s citations in %.1fms",
            len(fetched.documents),
            fetched.total_count,
            len(result.top_chunks),
            len(result.citations),
            (time.perf_counter() - started) * 1000,
        )
        return result

    def _assemble(
        self,
        documents: List[dict],
        query: Optional[str],
        drug: Optional[str],
        condition: Optional[str],
        top_k: int,
    ) -> RAGResult:
        all_chunks: List[TextChunk] = []
        for label in documents:
            text = extract_label_text(label)
            if not text.strip():
                logger.debug("Skipping label without extractable text: %s", label.get("id"))
                continue
            all_chunks.extend(
                chunk_text(
                    text,
                    chunk_size=self.config.chunk_size,
                    overlap=self.config.chunk_overlap,
                    source_id=label_id(label),
                    metadata=label_metadata(label),
                )
            )
        logger.debug("Pooled %s chunks from %s labels", len(all_chunks), len(documents))

        query_text = " ".join(part for part in (query, drug, condition) if part)
        top_chunks = rank_and_pick_top(all_chunks, query_text, top_k, self.boost_keywords)

        summary = summarize_chunks(
            top_chunks,
            source=self.source,
            query=query,
            drug=drug,
            condition=condition,
            max_length=self.config.summary_max_length,
        )
        citations = extract_citations(top_chunks)

        return RAGResult(
            source=self.source,
            query=query,
            drug=drug,
            condition=condition,
            top_chunks=[self._preview(chunk) for chunk in top_chunks],
            summary=summary,
            citations=citations,
        )

    def _preview(self, chunk: TextChunk) -> TextChunk:
        cap = self.config.chunk_preview_chars
        if len(chunk.text) <= cap:
            return chunk
        return chunk.model_copy(update={"text": chunk.text[:cap] + "..."})

    def _empty_result(
        self,
        summary: str,
        query: Optional[str],
        drug: Optional[str],
        condition: Optional[str],
    ) -> RAGResult:
        return RAGResult(
            source=self.source,
            query=query,
            drug=drug,
            condition=condition,
            top_chunks=[],
            summary=summary,
            citations=[],
        )
