from __future__ import annotations

from typing import Iterable, List, Tuple
from uuid import UUID

from loguru import logger
from tortoise.transactions import in_transaction

from pageflow.records import KeywordMetricData, KeywordMetricRecord, KeywordType
from pageflow.storage import mapping
from pageflow.storage.models import KeywordMetric


class KeywordMetricStore:
    async def upsert_many(
        self,
        seo_artifact_id: UUID,
        metrics: Iterable[Tuple[KeywordMetricData, KeywordType]],
    ) -> int:
        """Insert or overwrite rows keyed on (seo_artifact_id, keyword)."""
        count = 0
        async with in_transaction() as conn:
            for data, keyword_type in metrics:
                await KeywordMetric.update_or_create(
                    defaults={
                        "keyword_type": keyword_type,
                        "search_volume": data.search_volume,
                        "cpc": data.cpc,
                        "competition": data.competition,
                        "competition_index": data.competition_index,
                        "low_bid": data.low_bid,
                        "high_bid": data.high_bid,
                    },
                    seo_artifact_id=seo_artifact_id,
                    keyword=data.keyword,
                    using_db=conn,
                )
                count += 1

        logger.debug(f"Upserted {count} keyword metrics for SEO artifact {seo_artifact_id}")
        return count

    async def list_for_artifact(self, seo_artifact_id: UUID) -> List[KeywordMetricRecord]:
        rows = await KeywordMetric.filter(seo_artifact_id=seo_artifact_id).order_by(
            "keyword_type", "keyword"
        )
        return [mapping.keyword_metric_record(row) for row in rows]
