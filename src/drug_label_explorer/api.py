"""
REST API for Drug Label Explorer
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

import httpx
import uvicorn
from fastapi import FastAPI, HTTPException, Path, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .config import Config, configure_logging, get_config
from .label_service import DrugLabelService
from .labels import OpenFDALabelFetcher
from .models.responses import AEPipelineRequest
from .openfda_client import OpenFDAClient, OpenFDAError
from .pipeline import AEPipeline, PipelineError

logger = logging.getLogger(__name__)


class APIResponse(BaseModel):
    """Standard API response model"""
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[str] = None
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())


def _upstream_error(exc: Exception) -> bool:
    if isinstance(exc, PipelineError):
        exc = exc.__cause__ or exc
    return isinstance(exc, (OpenFDAError, httpx.HTTPError))


def _raise_http(action: str, exc: Exception) -> None:
    logger.error(f"{action} failed: {exc}")
    status_code = 502 if _upstream_error(exc) else 500
    raise HTTPException(status_code=status_code, detail=str(exc)) from exc


def create_app(config: Optional[Config] = None, client: Optional[OpenFDAClient] = None) -> FastAPI:
    """Create and configure FastAPI application"""
    config = config or get_config()
    client = client or OpenFDAClient()

    service = DrugLabelService(client)
    pipeline = AEPipeline(OpenFDALabelFetcher(client), config.rag)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifespan"""
        logger.info("Starting Drug Label Explorer API...")
        issues = config.get_validation_summary()
        for warning in issues["warnings"]:
            logger.warning(warning)
        yield
        logger.info("Drug Label Explorer API stopped")

    app = FastAPI(
        title="OpenFDA Drug Labels API",
        description=config.description,
        version=config.app_version,
        docs_url=config.api.docs_url,
        redoc_url=config.api.redoc_url,
        openapi_url=config.api.openapi_url,
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_model=APIResponse)
    async def root():
        """Root endpoint"""
        return APIResponse(
            success=True,
            data={
                "name": config.app_name,
                "version": config.app_version,
                "description": config.description,
                "endpoints": [
                    "/drug-labels",
                    "/drug/{name}/adverse-reactions",
                    "/drug/{name}/warnings",
                    "/drug/{name}/indications",
                    "/rag/ae-pipeline",
                    "/health",
                ],
            },
            message="Drug Label Explorer API is running",
        )

    @app.get("/health", response_model=APIResponse)
    async def health_check():
        """Health check endpoint"""
        return APIResponse(
            success=True,
            data={"status": "ok", "api_version": config.app_version},
            message="Service is healthy",
        )

    @app.get("/drug-labels", response_model=APIResponse)
    async def search_drug_labels(
        search: Optional[str] = Query(None, description="Search query, e.g. drug name or active ingredient"),
        count: Optional[str] = Query(None, description="Field to count results by"),
        skip: int = Query(0, ge=0, description="Records to skip (pagination)"),
        limit: int = Query(10, ge=1, le=200, description="Maximum records to return"),
    ):
        """Search FDA drug labels"""
        try:
            result = await service.search_labels(search=search, count=count, skip=skip, limit=limit)
        except Exception as e:
            _raise_http("Drug label search", e)
        return APIResponse(success=True, data=result.model_dump(), message=f"Found {result.results_count} labels")

    @app.get("/drug/{name}/adverse-reactions", response_model=APIResponse)
    async def drug_adverse_reactions(
        name: str = Path(..., description="Drug name"),
        limit: int = Query(3, ge=1, le=10),
    ):
        """Adverse reactions and contraindications for a drug"""
        try:
            result = await service.get_adverse_reactions(name, limit)
        except Exception as e:
            _raise_http("Adverse reactions lookup", e)
        return APIResponse(success=True, data=result.model_dump(), message=f"Adverse reactions for '{name}'")

    @app.get("/drug/{name}/warnings", response_model=APIResponse)
    async def drug_warnings(
        name: str = Path(..., description="Drug name"),
        limit: int = Query(3, ge=1, le=10),
    ):
        """Warnings, precautions and boxed warnings for a drug"""
        try:
            result = await service.get_warnings(name, limit)
        except Exception as e:
            _raise_http("Warnings lookup", e)
        return APIResponse(success=True, data=result.model_dump(), message=f"Warnings for '{name}'")

    @app.get("/drug/{name}/indications", response_model=APIResponse)
    async def drug_indications(
        name: str = Path(..., description="Drug name"),
        limit: int = Query(3, ge=1, le=10),
    ):
        """Indications and usage for a drug"""
        try:
            result = await service.get_indications(name, limit)
        except Exception as e:
            _raise_http("Indications lookup", e)
        return APIResponse(success=True, data=result.model_dump(), message=f"Indications for '{name}'")

    @app.post("/rag/ae-pipeline", response_model=APIResponse)
    async def ae_pipeline(request: AEPipelineRequest):
        """Fetch, chunk, rank and summarize drug label safety data"""
        try:
            result = await pipeline.run_request(request)
        except PipelineError as e:
            _raise_http("RAG pipeline", e)
        return APIResponse(
            success=True,
            data=result.model_dump(exclude_none=True),
            message=f"Selected {len(result.top_chunks)} label excerpts",
        )

    return app


def run_api_server(host: Optional[str] = None, port: Optional[int] = None, reload: bool = False) -> None:
    """Run the API server with uvicorn"""
    config = get_config()
    configure_logging(config.logging)

    if reload:
        uvicorn.run(
            "drug_label_explorer.api:create_app",
            factory=True,
            host=host or config.api.host,
            port=port or config.api.port,
            reload=True,
        )
        return

    uvicorn.run(
        create_app(config),
        host=host or config.api.host,
        port=port or config.api.port,
        log_level=config.logging.level.lower(),
    )
