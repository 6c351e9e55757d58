"""
Semantic Scholar batch API client.

Direct HTTP client for the Semantic Scholar paper batch endpoint using
httpx. Talks either to the public API or to the rate-limiting proxy.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional, Sequence

import httpx

from ..config import DEFAULT_S2_BASE_URL, RATE_LIMIT_EXHAUSTED_HEADER
from .exceptions import (
    RateLimitError,
    ResponseParseError,
    TransportError,
    UpstreamError,
)
from .models import PaperIdentifier, PaperRecord, PaperStub

logger = logging.getLogger("citation-graph")

PAPER_BATCH_PATH = "/paper/batch"

# Upstream ceiling on ids per batch call
MAX_PAPERS_PER_BATCH_CALL = 500


class SemanticScholarClient:
    """
    Async client for the Semantic Scholar paper batch endpoint.

    Large requests are split into sub-batches no larger than the upstream
    ceiling and issued concurrently. "Too many requests" answers are
    retried with exponential delay; every other error status is surfaced
    immediately.
    """

    # Fields to request for each paper and its references
    BATCH_FIELDS = [
        "title",
        "url",
        "references.paperId",
        "references.title",
        "references.url",
    ]

    def __init__(
        self,
        base_url: str = DEFAULT_S2_BASE_URL,
        api_key: Optional[str] = None,
        timeout: int = 60,
        max_batch_size: int = MAX_PAPERS_PER_BATCH_CALL,
        max_attempts: int = 5,
        retry_delay: float = 1.0,
        backoff_factor: float = 2.0,
    ):
        """
        Initialize the Semantic Scholar client.

        Args:
            base_url: Graph API root, or the rate-limiting proxy's.
            api_key: Optional API key, not needed behind the proxy.
            timeout: Request timeout in seconds.
            max_batch_size: Maximum ids per batch request.
            max_attempts: Attempts per sub-batch on HTTP 429.
            retry_delay: Delay before the first retry, in seconds.
            backoff_factor: Multiplier applied to the delay on each retry.
        """
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.max_batch_size = max_batch_size
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.backoff_factor = backoff_factor
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None:
            headers = {}
            if self.api_key:
                headers["x-api-key"] = self.api_key
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
            )
        return self._client

    def _parse_record(self, data: Optional[dict[str, Any]]) -> Optional[PaperRecord]:
        """Convert one batch result entry to a PaperRecord."""
        if not isinstance(data, dict) or not data.get("paperId"):
            return None

        references = []
        for ref in data.get("references") or []:
            if not isinstance(ref, dict):
                continue
            references.append(
                PaperStub(
                    id=ref.get("paperId") or None,
                    title=ref.get("title") or "Unknown Title",
                    url=ref.get("url"),
                )
            )

        return PaperRecord(
            id=data["paperId"],
            title=data.get("title") or "Unknown Title",
            url=data.get("url") or "",
            references=tuple(references),
        )

    def _chunk(self, ids: Sequence[PaperIdentifier]) -> list[list[str]]:
        wire_ids = [paper_id.to_wire() for paper_id in ids]
        return [
            wire_ids[low:low + self.max_batch_size]
            for low in range(0, len(wire_ids), self.max_batch_size)
        ]

    async def _post_batch(self, wire_ids: list[str]) -> list[Optional[PaperRecord]]:
        """Issue one sub-batch, retrying on HTTP 429."""
        client = await self._get_client()
        params = {"fields": ",".join(self.BATCH_FIELDS)}

        for attempt in range(self.max_attempts):
            logger.info(f"POST {PAPER_BATCH_PATH}: {len(wire_ids)} papers")
            try:
                response = await client.post(
                    PAPER_BATCH_PATH,
                    params=params,
                    json={"ids": wire_ids},
                )
            except httpx.HTTPError as e:
                raise TransportError(f"Batch request failed: {e}") from e

            if response.status_code == 429:
                if attempt < self.max_attempts - 1:
                    wait_time = self.retry_delay * self.backoff_factor**attempt
                    logger.warning(
                        f"Rate limited (attempt {attempt + 1}/{self.max_attempts}), "
                        f"retrying in {wait_time:.1f}s"
                    )
                    await asyncio.sleep(wait_time)
                    continue
                raise RateLimitError(
                    f"Rate limit exceeded after {self.max_attempts} attempts",
                    status_code=429,
                )

            if (
                response.status_code == 504
                and response.headers.get(RATE_LIMIT_EXHAUSTED_HEADER)
            ):
                # The proxy gave up retrying the upstream on our behalf
                raise RateLimitError(
                    "Rate-limiting proxy exhausted its retries",
                    status_code=504,
                )

            if response.is_error:
                raise UpstreamError(response.status_code, response.text)

            return self._parse_response(response.text, expected=len(wire_ids))

        # max_attempts >= 1, so the loop always returns or raises
        raise RateLimitError(f"Rate limit exceeded after {self.max_attempts} attempts")

    def _parse_response(self, text: str, expected: int) -> list[Optional[PaperRecord]]:
        try:
            results = json.loads(text)
        except ValueError as e:
            raise ResponseParseError(f"Batch response is not JSON: {e}", text) from e

        if not isinstance(results, list):
            raise ResponseParseError("Batch response is not a list", text)
        if len(results) != expected:
            logger.warning(
                f"Batch response has {len(results)} entries for {expected} ids"
            )

        try:
            return [self._parse_record(item) for item in results]
        except (TypeError, ValueError) as e:
            raise ResponseParseError(f"Malformed paper in batch response: {e}", text) from e

    async def fetch_batch(
        self,
        paper_ids: Sequence[PaperIdentifier],
    ) -> list[Optional[PaperRecord]]:
        """
        Fetch papers and their references in bulk.

        Args:
            paper_ids: Identifiers to look up.

        Returns:
            One entry per requested id, in request order: the PaperRecord,
            or None when the upstream could not resolve the id.

        Raises:
            DataSourceError: If any sub-batch fails. The other sub-batches
                are cancelled and their results discarded.
        """
        if not paper_ids:
            logger.info("No papers requested")
            return []

        chunks = self._chunk(paper_ids)
        tasks = [asyncio.create_task(self._post_batch(chunk)) for chunk in chunks]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # gather does not cancel the siblings of a failed sub-batch
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        papers: list[Optional[PaperRecord]] = []
        for chunk_result in results:
            papers.extend(chunk_result)

        resolved = sum(1 for paper in papers if paper is not None)
        logger.info(f"Resolved {resolved}/{len(paper_ids)} papers in {len(chunks)} batches")
        return papers

    async def close(self) -> None:
        """Close the client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
