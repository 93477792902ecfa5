"""
MCP server exposing the drug label tools over stdio.

Every MCP tool delegates to the matching LangChain tool.

Usage:
    drug-label-mcp
    drug-label-mcp --log-level DEBUG
"""
from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from .agent.tools import get_tools
from .config import LoggingConfig, auto_load_config, configure_logging, load_config
from .label_service import DrugLabelService
from .pipeline import AEPipeline

logger = logging.getLogger(__name__)

SERVER_NAME = "openfda-drug-label"

_MCP_INSTRUCTIONS = (
    "FDA drug label data from openFDA.\n"
    "\n"
    "PRIMARY: Use ae_pipeline_rag for safety questions; it returns a bounded\n"
    "         summary, the most relevant label excerpts and citations.\n"
    "LOOKUP:  get_drug_adverse_reactions, get_drug_warnings and\n"
    "         get_drug_indications return one section group per label.\n"
    "RAW:     search_drug_labels runs an openFDA search or count query.\n"
)


def create_server(
    service: Optional[DrugLabelService] = None,
    pipeline: Optional[AEPipeline] = None,
) -> FastMCP:
    """Create the FastMCP server with all drug label tools registered."""
    tools = {tool.name: tool for tool in get_tools(service=service, pipeline=pipeline)}

    mcp = FastMCP(name=SERVER_NAME, instructions=_MCP_INSTRUCTIONS)

    async def call(name: str, arguments: Dict[str, Any]) -> str:
        # Drop unset optionals so the tool schema defaults apply.
        payload = {k: v for k, v in arguments.items() if v is not None}
        logger.debug("MCP call %s(%s)", name, payload)
        return await tools[name].ainvoke(payload)

    @mcp.tool(description=tools["search_drug_labels"].description)
    async def search_drug_labels(
        search: Optional[str] = None,
        count: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> str:
        return await call("search_drug_labels", {"search": search, "count": count, "skip": skip, "limit": limit})

    @mcp.tool(description=tools["get_drug_adverse_reactions"].description)
    async def get_drug_adverse_reactions(drug_name: str, limit: int = 3) -> str:
        return await call("get_drug_adverse_reactions", {"drug_name": drug_name, "limit": limit})

    @mcp.tool(description=tools["get_drug_warnings"].description)
    async def get_drug_warnings(drug_name: str, limit: int = 3) -> str:
        return await call("get_drug_warnings", {"drug_name": drug_name, "limit": limit})

    @mcp.tool(description=tools["ae_pipeline_rag"].description)
    async def ae_pipeline_rag(
        query: Optional[str] = None,
        drug: Optional[str] = None,
        condition: Optional[str] = None,
        top_k: int = 5,
        filters: Optional[Dict[str, Any]] = None,
    ) -> str:
        return await call(
            "ae_pipeline_rag",
            {"query": query, "drug": drug, "condition": condition, "top_k": top_k, "filters": filters},
        )

    @mcp.tool(description=tools["get_drug_indications"].description)
    async def get_drug_indications(drug_name: str, limit: int = 3) -> str:
        return await call("get_drug_indications", {"drug_name": drug_name, "limit": limit})

    return mcp


def build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser for the MCP server."""
    p = argparse.ArgumentParser(
        prog="drug-label-mcp",
        description="OpenFDA drug label MCP server (stdio)",
    )
    p.add_argument("--config", help="Path to YAML configuration file")
    p.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override the configured log level",
    )
    return p


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)
    config = load_config(args.config) if args.config else auto_load_config()

    logging_config: LoggingConfig = config.logging
    if args.log_level:
        logging_config = logging_config.model_copy(update={"level": args.log_level})
    # stdout carries the MCP protocol; logging.StreamHandler writes to stderr.
    configure_logging(logging_config)

    logger.info("OpenFDA drug label MCP server running on stdio")
    create_server().run()


if __name__ == "__main__":
    main()
