"""
Drug Label Explorer - FDA drug label search and safety summarization

This package exposes openFDA drug label lookups and a lexical RAG pipeline
that condenses label text into a bounded summary with the most relevant
excerpts and their citations, for use as LLM tools, over REST or over MCP.
"""

__version__ = "1.0.0"

from .config import Config, get_config
from .label_service import DrugLabelService
from .openfda_client import OpenFDAClient, OpenFDAError
from .pipeline import AEPipeline, PipelineError

__all__ = [
    "AEPipeline",
    "Config",
    "DrugLabelService",
    "OpenFDAClient",
    "OpenFDAError",
    "PipelineError",
    "get_config",
]
