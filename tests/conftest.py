"""Pytest configuration and fixtures."""
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from drug_label_explorer.config import Config, RAGConfig, set_config
from drug_label_explorer.labels import FetchResult
from drug_label_explorer.openfda_client import OpenFDAClient
from tests.fixtures.mock_label_responses import IBUPROFEN_LABEL, WARFARIN_LABEL


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from default settings."""
    config = Config()
    set_config(config)
    yield config
    set_config(None)
    logging.getLogger("drug_label_explorer").setLevel(logging.NOTSET)


class FakeFetcher:
    """In-memory LabelFetcher recording every call."""

    def __init__(self, documents: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.documents = documents or []
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def fetch(self, search: str, skip: int = 0, limit: int = 50) -> FetchResult:
        self.calls.append({"search": search, "skip": skip, "limit": limit})
        if self.error:
            raise self.error
        return FetchResult(documents=self.documents[:limit], total_count=len(self.documents))


@pytest.fixture
def labels() -> List[Dict[str, Any]]:
    return [WARFARIN_LABEL, IBUPROFEN_LABEL]


@pytest.fixture
def fake_fetcher(labels) -> FakeFetcher:
    return FakeFetcher(labels)


@pytest.fixture
def rag_config() -> RAGConfig:
    return RAGConfig(chunk_size=200, chunk_overlap=40)


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], OpenFDAClient]:
    """Build an OpenFDAClient answering through the given request handler."""

    def build(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> OpenFDAClient:
        kwargs.setdefault("max_retries", 0)
        kwargs.setdefault("rate_limit_delay", 0.0)
        return OpenFDAClient(
            base_url="https://api.fda.gov/",
            async_transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return build
