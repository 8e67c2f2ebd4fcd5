from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple
from uuid import UUID

import httpx
from loguru import logger

from pageflow.errors import EnrichmentFailure, KeywordProviderError
from pageflow.records import KeywordMetricData, KeywordType
from pageflow.storage.keyword_metric_store import KeywordMetricStore


class KeywordMetricsProvider(Protocol):
    async def fetch_metrics(self, keywords: Sequence[str]) -> List[KeywordMetricData]: ...


@dataclass(frozen=True)
class EnrichmentJob:
    seo_artifact_id: UUID
    page_id: UUID
    version: int
    primary_keywords: Tuple[str, ...]
    secondary_keywords: Tuple[str, ...]


def _key(keyword: str) -> str:
    return keyword.strip().casefold()


def dedupe_keywords(primary: Sequence[str], secondary: Sequence[str]) -> List[str]:
    seen: set[str] = set()
    keywords: List[str] = []
    for keyword in list(primary) + list(secondary):
        key = _key(keyword)
        if key and key not in seen:
            seen.add(key)
            keywords.append(keyword.strip())
    return keywords


def classify_keyword(keyword: str, primary: Sequence[str]) -> KeywordType:
    primary_keys = {_key(k) for k in primary}
    return KeywordType.PRIMARY if _key(keyword) in primary_keys else KeywordType.SECONDARY


class KeywordMetricsPipeline:
    """Fetch market metrics for one SEO artifact version and store them.

    A single provider call per job, bounded by ``timeout``. Rows are upserted
    on (seo_artifact_id, keyword), so running a job twice overwrites instead of
    duplicating, and a late job only ever touches its own artifact's rows.
    """

    def __init__(
        self,
        provider: KeywordMetricsProvider,
        store: Optional[KeywordMetricStore] = None,
        *,
        timeout: float = 30.0,
    ) -> None:
        self.provider = provider
        self.store = store or KeywordMetricStore()
        self.timeout = timeout

    async def enrich(self, job: EnrichmentJob) -> int:
        keywords = dedupe_keywords(job.primary_keywords, job.secondary_keywords)
        if not keywords:
            logger.debug(f"No keywords to enrich for SEO artifact {job.seo_artifact_id}")
            return 0

        try:
            metrics = await asyncio.wait_for(
                self.provider.fetch_metrics(keywords), timeout=self.timeout
            )
        except asyncio.TimeoutError as exc:
            raise EnrichmentFailure(
                job.seo_artifact_id, f"provider timed out after {self.timeout}s"
            ) from exc
        except (KeywordProviderError, httpx.HTTPError) as exc:
            raise EnrichmentFailure(job.seo_artifact_id, str(exc)) from exc

        rows = [
            (metric, classify_keyword(metric.keyword, job.primary_keywords))
            for metric in metrics
        ]
        stored = await self.store.upsert_many(job.seo_artifact_id, rows)
        logger.info(
            f"Stored metrics for {stored} keywords of SEO artifact {job.seo_artifact_id} "
            f"(page {job.page_id} v{job.version})"
        )
        return stored
