import asyncio
import signal
from dataclasses import dataclass
from typing import Optional

from aiohttp import web
from loguru import logger

from pageflow.enrichment.dataforseo_client import DataForSEOClient
from pageflow.enrichment.keyword_metrics import KeywordMetricsPipeline
from pageflow.enrichment.queue import EnrichmentQueue
from pageflow.monitoring.metrics_server import start_metrics_server
from pageflow.storage.postgres.postgres_init import close_db, init_db
from pageflow.utils.config_loader import Config, load_config
from pageflow.utils.logger import setup_logger
from pageflow.workflow import PageWorkflow


@dataclass
class EngineRuntime:
    workflow: PageWorkflow
    enrichment: EnrichmentQueue
    provider: DataForSEOClient
    metrics_runner: Optional[web.AppRunner] = None


# -------------------------------
# STARTUP / SHUTDOWN
# -------------------------------
async def start_engine(config: Config, *, serve_metrics: bool = True) -> EngineRuntime:
    await init_db(config)

    provider = DataForSEOClient.from_config(config)
    await provider.connect()

    pipeline = KeywordMetricsPipeline(provider, timeout=config.enrichment_timeout)
    enrichment = EnrichmentQueue(
        pipeline,
        workers=config.enrichment_workers,
        maxsize=config.enrichment_queue_size,
    )
    await enrichment.start()

    metrics_runner = None
    if serve_metrics:
        metrics_runner, _ = await start_metrics_server(port=config.metrics_port)
        logger.info(f"Metrics available on :{config.metrics_port}/metrics")

    workflow = PageWorkflow(enrichment=enrichment, max_upload_bytes=config.max_upload_bytes)
    return EngineRuntime(
        workflow=workflow,
        enrichment=enrichment,
        provider=provider,
        metrics_runner=metrics_runner,
    )


async def stop_engine(runtime: EngineRuntime) -> None:
    await runtime.enrichment.stop()

    if runtime.metrics_runner is not None:
        await runtime.metrics_runner.shutdown()
        await runtime.metrics_runner.cleanup()

    await runtime.provider.close()
    await close_db()


# -------------------------------
# MAIN APPLICATION
# -------------------------------
async def main() -> None:
    config = load_config()
    setup_logger(config.log_level, config.log_path, component="engine")

    logger.info("Starting page workflow engine...")
    runtime = await start_engine(config)

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown_event.set)

    logger.info("Page workflow engine started successfully.")

    try:
        await shutdown_event.wait()
    except asyncio.CancelledError:
        pass
    finally:
        logger.info("Shutting down page workflow engine...")
        await stop_engine(runtime)


# -------------------------------
# ENTRYPOINT
# -------------------------------
if __name__ == "__main__":
    asyncio.run(main())
