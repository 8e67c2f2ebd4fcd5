"""Typed records the engine works with.

Storage models never leave ``pageflow.storage``; the stores hand back these
frozen dataclasses instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID


class PageStatus(str, Enum):
    DRAFT = "draft"
    AWAITING_SEO = "awaiting_seo"
    AWAITING_CONTENT = "awaiting_content"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    REVISION_REQUESTED = "revision_requested"


class ReviewAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_REVISION = "request_revision"


class ArtifactKind(str, Enum):
    SEO = "seo"
    CONTENT = "content"


class KeywordType(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class NormalizedContent:
    """Format-agnostic content body, as produced by the file parser."""

    meta_title: str = ""
    meta_description: str = ""
    h1: List[str] = field(default_factory=list)
    h2: List[str] = field(default_factory=list)
    h3: List[str] = field(default_factory=list)
    paragraphs: List[str] = field(default_factory=list)
    alt_texts: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(
            [
                self.meta_title.strip(),
                self.meta_description.strip(),
                self.h1,
                self.h2,
                self.h3,
                self.paragraphs,
                self.alt_texts,
            ]
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "meta_title": self.meta_title,
            "meta_description": self.meta_description,
            "h1": list(self.h1),
            "h2": list(self.h2),
            "h3": list(self.h3),
            "paragraphs": list(self.paragraphs),
            "alt_texts": list(self.alt_texts),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NormalizedContent":
        return cls(
            meta_title=str(data.get("meta_title") or ""),
            meta_description=str(data.get("meta_description") or ""),
            h1=list(data.get("h1") or []),
            h2=list(data.get("h2") or []),
            h3=list(data.get("h3") or []),
            paragraphs=list(data.get("paragraphs") or []),
            alt_texts=list(data.get("alt_texts") or []),
        )


@dataclass(frozen=True)
class PageRecord:
    id: UUID
    project_id: UUID
    name: str
    slug: str
    status: PageStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class SeoArtifactRecord:
    id: UUID
    page_id: UUID
    primary_keywords: List[str]
    secondary_keywords: List[str]
    uploaded_by: str
    version: int
    uploaded_at: Optional[datetime] = None

    @property
    def kind(self) -> ArtifactKind:
        return ArtifactKind.SEO


@dataclass(frozen=True)
class ContentArtifactRecord:
    id: UUID
    page_id: UUID
    content: NormalizedContent
    source_document_url: Optional[str]
    uploaded_by: str
    version: int
    uploaded_at: Optional[datetime] = None

    @property
    def kind(self) -> ArtifactKind:
        return ArtifactKind.CONTENT


@dataclass(frozen=True)
class KeywordMetricData:
    """One row as returned by the external metrics provider."""

    keyword: str
    search_volume: Optional[int] = None
    cpc: Optional[float] = None
    competition: Optional[str] = None
    competition_index: Optional[int] = None
    low_bid: Optional[float] = None
    high_bid: Optional[float] = None


@dataclass(frozen=True)
class KeywordMetricRecord:
    id: UUID
    seo_artifact_id: UUID
    keyword: str
    keyword_type: KeywordType
    search_volume: Optional[int]
    cpc: Optional[float]
    competition: Optional[str]
    competition_index: Optional[int]
    low_bid: Optional[float]
    high_bid: Optional[float]
    fetched_at: Optional[datetime] = None


@dataclass(frozen=True)
class AnalysisRecord:
    id: UUID
    page_id: UUID
    overall_score: float
    sub_scores: Dict[str, Optional[float]]
    feedback: Any
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class PageOverview:
    page: PageRecord
    seo: Optional[SeoArtifactRecord]
    content: Optional[ContentArtifactRecord]
    analysis: Optional[AnalysisRecord]
