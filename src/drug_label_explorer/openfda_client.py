"""
Shared OpenFDA HTTP client with retry/backoff for the drug label endpoint.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import httpx

from .config import get_config

logger = logging.getLogger("drug_label_explorer.openfda")


class OpenFDAError(Exception):
    """Raised when openFDA rejects a query or stays unavailable after retries."""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"OpenFDA API error ({status_code}): {detail}")


def empty_label_payload(skip: int = 0, limit: int = 0) -> Dict[str, Any]:
    """Payload shape openFDA would return for a query without matches."""
    return {"meta": {"results": {"skip": skip, "limit": limit, "total": 0}}, "results": []}


class OpenFDAClient:
    """Async HTTP client wrapper for OpenFDA with retry/backoff."""

    RETRY_STATUS_CODES = {429, 500, 502, 503, 504}

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        rate_limit_delay: Optional[float] = None,
        user_agent: Optional[str] = None,
        label_endpoint: Optional[str] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        config = get_config()
        openfda_cfg = config.openfda

        self.base_url = base_url or openfda_cfg.base_url
        self.api_key = api_key if api_key is not None else openfda_cfg.api_key
        self.timeout = timeout if timeout is not None else openfda_cfg.timeout
        self.max_retries = max_retries if max_retries is not None else openfda_cfg.max_retries
        self.rate_limit_delay = rate_limit_delay if rate_limit_delay is not None else openfda_cfg.rate_limit_delay
        self.label_endpoint = label_endpoint or openfda_cfg.label_endpoint
        self.headers = {"User-Agent": user_agent or openfda_cfg.user_agent}

        # Optional transport is provided for testing (httpx.MockTransport).
        self._async_transport = async_transport

    async def aget(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Async GET request."""
        data, _ = await self._request_async(path, params=params or {})
        return data

    async def asearch_labels(
        self,
        search: Optional[str] = None,
        count: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Dict[str, Any]:
        """
        Query the drug label endpoint.

        openFDA answers 404 when nothing matches; that is returned as an empty
        payload. Any other HTTP failure raises OpenFDAError.
        """
        params: Dict[str, Any] = {}
        if search:
            params["search"] = search
        if count:
            params["count"] = count
        if skip:
            params["skip"] = skip
        if limit:
            params["limit"] = limit

        try:
            data = await self.aget(self.label_endpoint, params=params)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                logger.debug("No labels matched search=%r", search)
                return empty_label_payload(skip, limit)
            raise OpenFDAError(exc.response.status_code, exc.response.text) from exc

        data.setdefault("results", [])
        data.setdefault("meta", {})
        if data["results"] is None:
            logger.error(f"Results is None from API response: {data}")
            data["results"] = []
        return data

    async def _request_async(
        self,
        path: str,
        params: Dict[str, Any],
    ) -> tuple[Dict[str, Any], float]:
        """Async request with retry/backoff."""
        prepared_params = self._prepare_params(params)
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries + 1):
            try:
                start = time.perf_counter()
                async with httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=self.timeout,
                    headers=self.headers,
                    transport=self._async_transport,
                ) as client:
                    response = await client.get(path, params=prepared_params)

                if self._should_retry(response.status_code, attempt):
                    delay = self._backoff_delay(attempt)
                    logger.warning(
                        "Retrying %s (status=%s, attempt=%s, delay=%.2fs)",
                        path,
                        response.status_code,
                        attempt + 1,
                        delay,
                    )
                    await asyncio.sleep(delay)
                    continue

                response.raise_for_status()
                elapsed_ms = (time.perf_counter() - start) * 1000
                logger.debug("GET %s params=%s answered in %.1fms", path, prepared_params, elapsed_ms)
                return response.json(), elapsed_ms

            except httpx.HTTPStatusError:
                # Retryable statuses were handled above; the rest are final.
                raise
            except httpx.TransportError as exc:
                last_error = exc
                if attempt < self.max_retries:
                    delay = self._backoff_delay(attempt)
                    logger.warning(
                        "Retrying %s after error: %s (attempt=%s, delay=%.2fs)",
                        path,
                        exc,
                        attempt + 1,
                        delay,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise

        raise last_error or RuntimeError("OpenFDA request failed without specific error")

    def _prepare_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        prepared = dict(params or {})
        if self.api_key:
            prepared.setdefault("api_key", self.api_key)
        return prepared

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        return status_code in self.RETRY_STATUS_CODES and attempt < self.max_retries

    def _backoff_delay(self, attempt: int) -> float:
        # Exponential backoff scaled by the configured rate_limit_delay.
        return self.rate_limit_delay * (2**attempt)
