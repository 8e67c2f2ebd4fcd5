from .dataforseo_client import DataForSEOClient
from .keyword_metrics import EnrichmentJob, KeywordMetricsPipeline, KeywordMetricsProvider
from .queue import EnrichmentQueue

__all__ = [
    "DataForSEOClient",
    "EnrichmentJob",
    "EnrichmentQueue",
    "KeywordMetricsPipeline",
    "KeywordMetricsProvider",
]
