from .analysis_store import AnalysisStore
from .artifact_store import VersionedArtifactStore
from .keyword_metric_store import KeywordMetricStore
from .page_store import PageStore

__all__ = [
    "AnalysisStore",
    "KeywordMetricStore",
    "PageStore",
    "VersionedArtifactStore",
]
