import re

import pytest

from drug_label_explorer.config import RAGConfig
from drug_label_explorer.labels import build_name_search
from drug_label_explorer.models.responses import AEPipelineRequest
from drug_label_explorer.openfda_client import OpenFDAError
from drug_label_explorer.pipeline import (
    MISSING_CRITERIA_MESSAGE,
    NO_MATCH_MESSAGE,
    SAFETY_BOOST_KEYWORDS,
    AEPipeline,
    PipelineError,
)
from tests.conftest import FakeFetcher
from tests.fixtures.mock_label_responses import EMPTY_LABEL


@pytest.mark.asyncio
async def test_missing_criteria_skips_fetch(fake_fetcher, rag_config):
    pipeline = AEPipeline(fake_fetcher, rag_config)

    result = await pipeline.run(query="  ")

    assert fake_fetcher.calls == []
    assert result.summary == MISSING_CRITERIA_MESSAGE
    assert result.top_chunks == []
    assert result.citations == []
    assert result.source == "openfda"


@pytest.mark.asyncio
async def test_no_matching_labels(rag_config):
    fetcher = FakeFetcher([])
    pipeline = AEPipeline(fetcher, rag_config)

    result = await pipeline.run(drug="aspirin")

    assert len(fetcher.calls) == 1
    assert result.summary == NO_MATCH_MESSAGE
    assert result.drug == "aspirin"
    assert result.citations == []
    assert result.top_chunks == []


@pytest.mark.asyncio
async def test_drug_query_produces_ranked_chunks_summary_and_citations(fake_fetcher, rag_config):
    pipeline = AEPipeline(fake_fetcher, rag_config)

    result = await pipeline.run(query="bleeding risk", drug="warfarin", top_k=3)

    call = fake_fetcher.calls[0]
    assert call["search"].startswith(build_name_search("warfarin"))
    assert call["limit"] == 50
    assert call["skip"] == 0

    assert 1 <= len(result.top_chunks) <= 3
    scores = [chunk.score for chunk in result.top_chunks]
    assert scores == sorted(scores, reverse=True)
    assert any(chunk.source == "warfarin-label-1" for chunk in result.top_chunks)
    assert any("bleeding" in chunk.text.lower() for chunk in result.top_chunks)
    assert result.summary.startswith("## FDA Drug Label Safety Information")
    assert "**Drug**: warfarin" in result.summary
    assert len(result.summary) <= rag_config.summary_max_length
    assert result.citations
    for citation in result.citations:
        assert citation.id in {"warfarin-label-1", "ibuprofen-label-1"} or re.fullmatch(r"NCT\d{8}", citation.id)


@pytest.mark.asyncio
async def test_chunks_from_all_labels_compete_in_one_pool(fake_fetcher, rag_config):
    pipeline = AEPipeline(fake_fetcher, rag_config)

    result = await pipeline.run(query="heart attack stroke", top_k=1)

    assert result.top_chunks[0].source == "ibuprofen-label-1"
    assert result.top_chunks[0].metadata["drug_name"] == "Advil"


@pytest.mark.asyncio
async def test_trial_ids_in_selected_chunks_are_cited(fake_fetcher, rag_config):
    pipeline = AEPipeline(fake_fetcher, rag_config)

    result = await pipeline.run(query="cardiovascular side effects", top_k=10)

    citations = {c.id: c.type for c in result.citations}
    assert citations["NCT00346216"] == "clinical_trial"
    assert citations["warfarin-label-1"] == "fda_label"


@pytest.mark.asyncio
async def test_chunk_text_is_capped_in_result(fake_fetcher):
    config = RAGConfig(chunk_size=5000, chunk_overlap=0, chunk_preview_chars=100)
    pipeline = AEPipeline(fake_fetcher, config)

    result = await pipeline.run(drug="warfarin", top_k=2)

    for chunk in result.top_chunks:
        assert len(chunk.text) <= 103
    assert any(chunk.text.endswith("...") for chunk in result.top_chunks)


@pytest.mark.asyncio
async def test_defaults_come_from_config(fake_fetcher, rag_config):
    config = rag_config.model_copy(update={"default_top_k": 2, "default_fetch_limit": 7})
    pipeline = AEPipeline(fake_fetcher, config)

    result = await pipeline.run(drug="warfarin")

    assert fake_fetcher.calls[0]["limit"] == 7
    assert len(result.top_chunks) == 2


@pytest.mark.asyncio
async def test_run_request_applies_filters(fake_fetcher, rag_config):
    pipeline = AEPipeline(fake_fetcher, rag_config)
    request = AEPipelineRequest(condition="thrombosis", top_k=1, filters={"limit": 1})

    result = await pipeline.run_request(request)

    assert fake_fetcher.calls[0]["limit"] == 1
    assert 'indications_and_usage:"thrombosis"' in fake_fetcher.calls[0]["search"]
    assert result.condition == "thrombosis"
    assert len(result.top_chunks) == 1


@pytest.mark.asyncio
async def test_labels_without_text_contribute_no_chunks(rag_config):
    pipeline = AEPipeline(FakeFetcher([EMPTY_LABEL]), rag_config)

    result = await pipeline.run(drug="placebo")

    assert result.top_chunks == []
    assert result.citations == []
    assert result.summary == "No relevant information found. Query: placebo"


@pytest.mark.asyncio
async def test_source_tag_selects_summary_template(fake_fetcher, rag_config):
    config = rag_config.model_copy(update={"source": "clinicaltrials"})
    pipeline = AEPipeline(fake_fetcher, config)

    result = await pipeline.run(drug="ibuprofen")

    assert result.source == "clinicaltrials"
    assert result.summary.startswith("## Clinical Trial Adverse Event Analysis")


@pytest.mark.asyncio
async def test_fetch_failure_raises_pipeline_error(rag_config):
    upstream = OpenFDAError(500, "boom")
    pipeline = AEPipeline(FakeFetcher(error=upstream), rag_config)

    with pytest.raises(PipelineError, match="boom") as excinfo:
        await pipeline.run(drug="warfarin")

    assert excinfo.value.__cause__ is upstream


@pytest.mark.asyncio
async def test_unexpected_internal_error_raises_pipeline_error(rag_config):
    # A malformed label record breaks text extraction after a successful fetch.
    pipeline = AEPipeline(FakeFetcher(["not-a-dict"]), rag_config)

    with pytest.raises(PipelineError, match="RAG pipeline failed") as excinfo:
        await pipeline.run(drug="warfarin")

    assert isinstance(excinfo.value.__cause__, AttributeError)


def test_boost_keywords_default_and_override(fake_fetcher, rag_config):
    assert AEPipeline(fake_fetcher, rag_config).boost_keywords == SAFETY_BOOST_KEYWORDS
    assert AEPipeline(fake_fetcher, rag_config, boost_keywords=[]).boost_keywords == []
    assert "不良反应" in SAFETY_BOOST_KEYWORDS


def test_result_payload_omits_unset_fields():
    from drug_label_explorer.models.responses import RAGResult

    payload = RAGResult(source="openfda", drug="warfarin", summary="s").to_payload()

    assert '"drug": "warfarin"' in payload
    assert '"query"' not in payload
