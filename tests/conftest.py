import asyncio
import os
import sys
import uuid
from pathlib import Path
from typing import List, Optional, Sequence

import pytest
from tortoise import Tortoise

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from pageflow.records import KeywordMetricData
from pageflow.storage.models import MODEL_MODULES
from pageflow.workflow import PageWorkflow


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep developer .env files and config.yaml out of the tests."""

    for key in [
        "DATABASE_URL",
        "MAX_UPLOAD_BYTES",
        "DATAFORSEO_BASE_URL",
        "DATAFORSEO_LOGIN",
        "DATAFORSEO_PASSWORD",
        "DATAFORSEO_LOCATION_CODE",
        "DATAFORSEO_LANGUAGE_CODE",
        "ENRICHMENT_TIMEOUT",
        "ENRICHMENT_WORKERS",
        "ENRICHMENT_QUEUE_SIZE",
        "METRICS_PORT",
        "LOG_LEVEL",
        "LOG_PATH",
    ]:
        monkeypatch.delenv(key, raising=False)

    monkeypatch.setenv("PAGEFLOW_CONFIG", str(tmp_path / "no-config.yaml"))
    monkeypatch.setenv("PAGEFLOW_ENV_FILE", str(tmp_path / "no.env"))

    yield

    for key in list(os.environ.keys()):
        if key.startswith("TEST_"):
            os.environ.pop(key, None)


@pytest.fixture
async def db():
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": MODEL_MODULES})
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def project_id():
    return uuid.uuid4()


@pytest.fixture
def workflow(db):
    return PageWorkflow()


@pytest.fixture
async def page(workflow, project_id):
    return await workflow.create_page(project_id, "Industrial Pumps", "industrial-pumps", "admin-1")


class FakeMetricsProvider:
    """Stands in for DataForSEO: answers with one row per keyword."""

    def __init__(
        self,
        *,
        volume: int = 100,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        metrics: Optional[List[KeywordMetricData]] = None,
    ):
        self.volume = volume
        self.error = error
        self.delay = delay
        self.metrics = metrics
        self.calls: List[List[str]] = []

    async def fetch_metrics(self, keywords: Sequence[str]) -> List[KeywordMetricData]:
        self.calls.append(list(keywords))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.metrics is not None:
            return list(self.metrics)
        return [
            KeywordMetricData(
                keyword=keyword.lower(),
                search_volume=self.volume,
                cpc=1.5,
                competition="LOW",
                competition_index=12,
                low_bid=0.4,
                high_bid=2.1,
            )
            for keyword in keywords
        ]


@pytest.fixture
def fake_provider():
    return FakeMetricsProvider()
