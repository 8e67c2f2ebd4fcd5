from aiohttp import web
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    generate_latest,
    Counter,
    Gauge,
    Histogram,
)

# -------------------------
# Artifact writes
# -------------------------

ARTIFACT_UPLOADS = Counter(
    "pageflow_artifact_uploads_total",
    "Artifact versions written",
    ["kind"],
)

VERSION_CONFLICTS = Counter(
    "pageflow_version_conflicts_total",
    "Uploads that lost a version race",
    ["kind"],
)

ARTIFACT_CORRECTIONS = Counter(
    "pageflow_artifact_corrections_total",
    "In-place corrections of the current artifact version",
    ["kind"],
)

STATUS_TRANSITIONS = Counter(
    "pageflow_status_transitions_total",
    "Page status changes",
    ["from_status", "to_status"],
)

# -------------------------
# Enrichment
# -------------------------

ENRICHMENT_JOBS = Counter(
    "pageflow_enrichment_jobs_total",
    "Keyword enrichment jobs by outcome",
    ["outcome"],  # success / failed / dropped / skipped
)

ENRICHMENT_LATENCY = Histogram(
    "pageflow_enrichment_latency_seconds",
    "Time spent on one keyword enrichment job",
)

ENRICHMENT_QUEUE_DEPTH = Gauge(
    "pageflow_enrichment_queue_depth",
    "Enrichment jobs waiting for a worker",
)


# -------------------------
# /metrics endpoint
# -------------------------

async def metrics_handler(request):
    data = generate_latest()

    # aiohttp rejects a charset inside content_type
    ctype = CONTENT_TYPE_LATEST.split(";")[0]

    return web.Response(
        body=data,
        content_type=ctype
    )


async def start_metrics_server(port=8000, host="0.0.0.0"):
    app = web.Application()
    app.router.add_get("/metrics", metrics_handler)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    return runner, site
