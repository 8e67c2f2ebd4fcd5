"""The one place where ORM rows become engine records."""

from __future__ import annotations

from pageflow.records import (
    AnalysisRecord,
    ContentArtifactRecord,
    KeywordMetricRecord,
    KeywordType,
    NormalizedContent,
    PageRecord,
    PageStatus,
    SeoArtifactRecord,
)
from pageflow.storage.models import (
    AnalysisResult,
    ContentArtifact,
    KeywordMetric,
    Page,
    SeoArtifact,
)


ANALYSIS_SUB_SCORES = (
    "seo_score",
    "readability_score",
    "keyword_density_score",
    "grammar_score",
    "content_intent_score",
    "technical_health_score",
)


def page_record(row: Page) -> PageRecord:
    return PageRecord(
        id=row.id,
        project_id=row.project_id,
        name=row.name,
        slug=row.slug,
        status=PageStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def seo_record(row: SeoArtifact) -> SeoArtifactRecord:
    return SeoArtifactRecord(
        id=row.id,
        page_id=row.page_id,
        primary_keywords=list(row.primary_keywords or []),
        secondary_keywords=list(row.secondary_keywords or []),
        uploaded_by=row.uploaded_by,
        version=row.version,
        uploaded_at=row.uploaded_at,
    )


def content_record(row: ContentArtifact) -> ContentArtifactRecord:
    return ContentArtifactRecord(
        id=row.id,
        page_id=row.page_id,
        content=NormalizedContent.from_dict(row.parsed_content or {}),
        source_document_url=row.source_document_url,
        uploaded_by=row.uploaded_by,
        version=row.version,
        uploaded_at=row.uploaded_at,
    )


def keyword_metric_record(row: KeywordMetric) -> KeywordMetricRecord:
    return KeywordMetricRecord(
        id=row.id,
        seo_artifact_id=row.seo_artifact_id,
        keyword=row.keyword,
        keyword_type=KeywordType(row.keyword_type),
        search_volume=row.search_volume,
        cpc=row.cpc,
        competition=row.competition,
        competition_index=row.competition_index,
        low_bid=row.low_bid,
        high_bid=row.high_bid,
        fetched_at=row.fetched_at,
    )


def analysis_record(row: AnalysisResult) -> AnalysisRecord:
    return AnalysisRecord(
        id=row.id,
        page_id=row.page_id,
        overall_score=row.overall_score,
        sub_scores={name: getattr(row, name) for name in ANALYSIS_SUB_SCORES},
        feedback=row.detailed_feedback,
        created_at=row.created_at,
    )
