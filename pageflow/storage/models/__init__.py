from .page_model import Page
from .seo_artifact_model import SeoArtifact
from .content_artifact_model import ContentArtifact
from .keyword_metric_model import KeywordMetric
from .analysis_result_model import AnalysisResult

MODEL_MODULES = [
    "pageflow.storage.models.page_model",
    "pageflow.storage.models.seo_artifact_model",
    "pageflow.storage.models.content_artifact_model",
    "pageflow.storage.models.keyword_metric_model",
    "pageflow.storage.models.analysis_result_model",
]

__all__ = [
    "Page",
    "SeoArtifact",
    "ContentArtifact",
    "KeywordMetric",
    "AnalysisResult",
    "MODEL_MODULES",
]
