import asyncio
import uuid

import httpx
import pytest

from conftest import FakeMetricsProvider
from pageflow.enrichment.keyword_metrics import (
    EnrichmentJob,
    KeywordMetricsPipeline,
    classify_keyword,
    dedupe_keywords,
)
from pageflow.errors import EnrichmentFailure, KeywordProviderError
from pageflow.records import KeywordMetricData, KeywordType
from pageflow.storage.keyword_metric_store import KeywordMetricStore
from pageflow.storage.models import KeywordMetric


async def _seo_artifact(workflow, page, primary, secondary):
    return await workflow.upload_seo_data(page.id, primary, secondary, "seo-1")


def _job(seo, primary, secondary):
    return EnrichmentJob(
        seo_artifact_id=seo.id,
        page_id=seo.page_id,
        version=seo.version,
        primary_keywords=tuple(primary),
        secondary_keywords=tuple(secondary),
    )


def test_dedupe_keeps_first_spelling():
    assert dedupe_keywords(["Pumps", "valves"], ["pumps ", "Fittings", "VALVES"]) == [
        "Pumps",
        "valves",
        "Fittings",
    ]


def test_classify_prefers_primary():
    assert classify_keyword("PUMPS", ["pumps"]) is KeywordType.PRIMARY
    assert classify_keyword("valves", ["pumps"]) is KeywordType.SECONDARY


async def test_enrich_stores_one_row_per_keyword(workflow, page):
    primary, secondary = ["pumps"], ["industrial pumps", "Pumps"]
    seo = await _seo_artifact(workflow, page, primary, secondary)
    provider = FakeMetricsProvider(volume=880)

    stored = await KeywordMetricsPipeline(provider).enrich(_job(seo, primary, secondary))

    assert stored == 2
    assert provider.calls == [["pumps", "industrial pumps"]]
    rows = await KeywordMetricStore().list_for_artifact(seo.id)
    assert [(r.keyword, r.keyword_type) for r in rows] == [
        ("pumps", KeywordType.PRIMARY),
        ("industrial pumps", KeywordType.SECONDARY),
    ]
    assert rows[0].search_volume == 880
    assert rows[0].high_bid == 2.1


async def test_enrich_twice_overwrites(workflow, page):
    seo = await _seo_artifact(workflow, page, ["pumps"], [])
    job = _job(seo, ["pumps"], [])

    await KeywordMetricsPipeline(FakeMetricsProvider(volume=10)).enrich(job)
    await KeywordMetricsPipeline(FakeMetricsProvider(volume=20)).enrich(job)

    rows = await KeywordMetricStore().list_for_artifact(seo.id)
    assert len(rows) == 1
    assert rows[0].search_volume == 20


async def test_metrics_belong_to_their_version(workflow, page):
    first = await _seo_artifact(workflow, page, ["pumps"], [])
    second = await _seo_artifact(workflow, page, ["valves"], [])

    pipeline = KeywordMetricsPipeline(FakeMetricsProvider())
    await pipeline.enrich(_job(second, ["valves"], []))
    await pipeline.enrich(_job(first, ["pumps"], []))

    assert [r.keyword for r in await workflow.get_keyword_metrics(first.id)] == ["pumps"]
    assert [r.keyword for r in await workflow.get_keyword_metrics(second.id)] == ["valves"]


async def test_provider_may_omit_keywords(workflow, page):
    seo = await _seo_artifact(workflow, page, ["pumps", "zzqx"], [])
    provider = FakeMetricsProvider(
        metrics=[KeywordMetricData(keyword="pumps", search_volume=50)]
    )

    stored = await KeywordMetricsPipeline(provider).enrich(_job(seo, ["pumps", "zzqx"], []))

    assert stored == 1


async def test_no_keywords_skips_provider(db):
    provider = FakeMetricsProvider()
    job = EnrichmentJob(uuid.uuid4(), uuid.uuid4(), 1, (" ",), ())

    assert await KeywordMetricsPipeline(provider).enrich(job) == 0
    assert provider.calls == []


@pytest.mark.parametrize(
    "error",
    [
        KeywordProviderError("quota exceeded"),
        httpx.ConnectError("connection refused"),
    ],
)
async def test_provider_errors_become_enrichment_failures(workflow, page, error):
    seo = await _seo_artifact(workflow, page, ["pumps"], [])
    pipeline = KeywordMetricsPipeline(FakeMetricsProvider(error=error))

    with pytest.raises(EnrichmentFailure) as excinfo:
        await pipeline.enrich(_job(seo, ["pumps"], []))

    assert excinfo.value.seo_artifact_id == seo.id
    assert await workflow.get_keyword_metrics(seo.id) == []


async def test_slow_provider_times_out(workflow, page):
    seo = await _seo_artifact(workflow, page, ["pumps"], [])
    pipeline = KeywordMetricsPipeline(FakeMetricsProvider(delay=1.0), timeout=0.05)

    with pytest.raises(EnrichmentFailure) as excinfo:
        await pipeline.enrich(_job(seo, ["pumps"], []))

    assert isinstance(excinfo.value.__cause__, asyncio.TimeoutError)


async def test_failed_upsert_leaves_no_partial_rows(workflow, page, monkeypatch):
    seo = await _seo_artifact(workflow, page, ["pumps", "valves"], [])
    original = KeywordMetric.update_or_create
    calls = []

    async def fail_on_second_row(*args, **kwargs):
        calls.append(kwargs["keyword"])
        if len(calls) == 2:
            raise RuntimeError("database went away")
        return await original(*args, **kwargs)

    monkeypatch.setattr(KeywordMetric, "update_or_create", fail_on_second_row)

    with pytest.raises(RuntimeError):
        await KeywordMetricsPipeline(FakeMetricsProvider()).enrich(
            _job(seo, ["pumps", "valves"], [])
        )

    assert calls == ["pumps", "valves"]
    assert await KeywordMetricStore().list_for_artifact(seo.id) == []
