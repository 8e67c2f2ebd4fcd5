from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Deque, List, Optional

from loguru import logger

from pageflow.enrichment.keyword_metrics import EnrichmentJob, KeywordMetricsPipeline
from pageflow.errors import EnrichmentFailure
from pageflow.monitoring.metrics_server import (
    ENRICHMENT_JOBS,
    ENRICHMENT_LATENCY,
    ENRICHMENT_QUEUE_DEPTH,
)


class EnrichmentQueue:
    """In-process worker pool for keyword enrichment.

    ``submit`` never waits: uploads hand a job over and return. Whatever the
    job does afterwards is visible only through logs, metrics and
    :attr:`failures`.
    """

    def __init__(
        self,
        pipeline: KeywordMetricsPipeline,
        *,
        workers: int = 2,
        maxsize: int = 1000,
        failure_history: int = 100,
    ) -> None:
        self.pipeline = pipeline
        self.worker_count = max(1, workers)
        self._queue: asyncio.Queue[EnrichmentJob] = asyncio.Queue(maxsize=maxsize)
        self._workers: List[asyncio.Task] = []
        self.failures: Deque[EnrichmentFailure] = deque(maxlen=failure_history)

    @property
    def running(self) -> bool:
        return bool(self._workers)

    def pending(self) -> int:
        return self._queue.qsize()

    # --------------------------
    #  Lifecycle
    # --------------------------
    async def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._run_worker(i), name=f"enrichment-{i}")
            for i in range(self.worker_count)
        ]
        logger.info(f"Enrichment pool started with {self.worker_count} workers.")

    async def stop(self) -> None:
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Enrichment pool stopped.")

    async def drain(self) -> None:
        """Wait until every submitted job has been processed."""
        await self._queue.join()

    # --------------------------
    #  Submission
    # --------------------------
    def submit(self, job: EnrichmentJob) -> bool:
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            ENRICHMENT_JOBS.labels(outcome="dropped").inc()
            logger.warning(
                f"Enrichment queue full; dropping job for SEO artifact {job.seo_artifact_id}"
            )
            return False

        ENRICHMENT_QUEUE_DEPTH.set(self._queue.qsize())
        logger.debug(f"Queued enrichment for SEO artifact {job.seo_artifact_id}")
        return True

    # --------------------------
    #  Worker loop
    # --------------------------
    async def _run_worker(self, worker_id: int) -> None:
        while True:
            job = await self._queue.get()
            ENRICHMENT_QUEUE_DEPTH.set(self._queue.qsize())
            try:
                await self._process(job, worker_id)
            finally:
                self._queue.task_done()

    async def _process(self, job: EnrichmentJob, worker_id: int) -> Optional[int]:
        start = time.perf_counter()
        try:
            stored = await self.pipeline.enrich(job)
        except asyncio.CancelledError:
            raise
        except EnrichmentFailure as exc:
            self._record_failure(exc, worker_id)
            return None
        except Exception as exc:
            self._record_failure(EnrichmentFailure(job.seo_artifact_id, repr(exc)), worker_id)
            logger.exception(f"[enrichment-{worker_id}] Unexpected error")
            return None
        finally:
            ENRICHMENT_LATENCY.observe(time.perf_counter() - start)

        ENRICHMENT_JOBS.labels(outcome="success" if stored else "skipped").inc()
        return stored

    def _record_failure(self, failure: EnrichmentFailure, worker_id: int) -> None:
        ENRICHMENT_JOBS.labels(outcome="failed").inc()
        self.failures.append(failure)
        logger.error(f"[enrichment-{worker_id}] {failure}")
