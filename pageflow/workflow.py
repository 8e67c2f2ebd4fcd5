"""Public surface of the page workflow engine.

API or UI layers talk to :class:`PageWorkflow` only. The acting user is an
explicit argument on every write; the engine keeps no per-request state.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Union
from uuid import UUID

from loguru import logger
from tortoise.transactions import in_transaction

from pageflow.enrichment.queue import EnrichmentQueue
from pageflow.errors import ValidationError
from pageflow.managers import (
    ContentArtifactManager,
    SeoArtifactManager,
    coerce_uuid,
    require_identity,
)
from pageflow.managers.content_manager import ContentInput
from pageflow.parsing.content_parser import parse_content_file
from pageflow.records import (
    AnalysisRecord,
    ArtifactKind,
    ContentArtifactRecord,
    KeywordMetricRecord,
    NormalizedContent,
    PageOverview,
    PageRecord,
    ReviewAction,
    SeoArtifactRecord,
)
from pageflow.storage import (
    AnalysisStore,
    KeywordMetricStore,
    PageStore,
    VersionedArtifactStore,
)
from pageflow.transitions import apply_review_action
from pageflow.utils.config_loader import MAX_UPLOAD_BYTES


SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

Id = Union[UUID, str]


def normalize_slug(slug: Optional[str]) -> str:
    value = (slug or "").strip().lower()
    if not value:
        raise ValidationError("Slug is required.", field="slug")
    if not SLUG_PATTERN.match(value):
        raise ValidationError(
            "Slug may only contain letters, digits and single hyphens.", field="slug"
        )
    return value


class PageWorkflow:
    def __init__(
        self,
        *,
        enrichment: Optional[EnrichmentQueue] = None,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
        pages: Optional[PageStore] = None,
        artifacts: Optional[VersionedArtifactStore] = None,
        keyword_metrics: Optional[KeywordMetricStore] = None,
        analyses: Optional[AnalysisStore] = None,
    ) -> None:
        self.pages = pages or PageStore()
        self.artifacts = artifacts or VersionedArtifactStore()
        self.keyword_metrics = keyword_metrics or KeywordMetricStore()
        self.analyses = analyses or AnalysisStore()
        self.max_upload_bytes = max_upload_bytes

        self.seo = SeoArtifactManager(self.artifacts, self.pages, enrichment)
        self.content = ContentArtifactManager(self.artifacts, self.pages)

    # --------------------------
    #  Pages
    # --------------------------
    async def create_page(
        self, project_id: Id, name: str, slug: str, creator: Optional[str]
    ) -> PageRecord:
        creator = require_identity(creator)
        project_uuid = coerce_uuid(project_id, "project_id")
        name = (name or "").strip()
        if not name:
            raise ValidationError("Page name is required.", field="name")

        page = await self.pages.create(project_uuid, name, normalize_slug(slug))
        logger.info(f"{creator} created page {page.id}")
        return page

    async def get_page(self, page_id: Id) -> PageRecord:
        return await self.pages.get(coerce_uuid(page_id, "page_id"))

    async def list_pages(self, project_id: Id) -> List[PageRecord]:
        return await self.pages.list_for_project(coerce_uuid(project_id, "project_id"))

    async def get_page_overview(self, page_id: Id) -> PageOverview:
        page = await self.get_page(page_id)
        return PageOverview(
            page=page,
            seo=await self.artifacts.get_latest(page.id, ArtifactKind.SEO),
            content=await self.artifacts.get_latest(page.id, ArtifactKind.CONTENT),
            analysis=await self.analyses.get_latest(page.id),
        )

    async def transition_page_status(
        self,
        page_id: Id,
        action: Union[ReviewAction, str],
        reviewer: Optional[str],
    ) -> PageRecord:
        reviewer = require_identity(reviewer)
        page_uuid = coerce_uuid(page_id, "page_id")

        async with in_transaction() as conn:
            page = await self.pages.get(page_uuid, using_db=conn, for_update=True)
            new_status = apply_review_action(page.status, action)
            page = await self.pages.set_status(page, new_status, using_db=conn)

        logger.info(f"{reviewer} moved page {page.id} to {page.status.value}")
        return page

    # --------------------------
    #  SEO data
    # --------------------------
    async def upload_seo_data(
        self,
        page_id: Id,
        primary_keywords: Optional[Iterable[str]],
        secondary_keywords: Optional[Iterable[str]],
        uploader: Optional[str],
    ) -> SeoArtifactRecord:
        return await self.seo.upload(page_id, primary_keywords, secondary_keywords, uploader)

    async def get_latest_seo_data(self, page_id: Id) -> Optional[SeoArtifactRecord]:
        return await self.seo.latest(page_id)

    async def get_seo_history(self, page_id: Id) -> List[SeoArtifactRecord]:
        return await self.seo.history(page_id)

    async def correct_seo_data(
        self,
        artifact_id: Id,
        editor: Optional[str],
        *,
        primary_keywords: Optional[Iterable[str]] = None,
        secondary_keywords: Optional[Iterable[str]] = None,
    ) -> SeoArtifactRecord:
        return await self.seo.correct(
            artifact_id,
            editor,
            primary_keywords=primary_keywords,
            secondary_keywords=secondary_keywords,
        )

    async def get_keyword_metrics(self, seo_artifact_id: Id) -> List[KeywordMetricRecord]:
        return await self.keyword_metrics.list_for_artifact(
            coerce_uuid(seo_artifact_id, "seo_artifact_id")
        )

    # --------------------------
    #  Content data
    # --------------------------
    def parse_content_file(self, file_name: str, data: Union[bytes, str]) -> NormalizedContent:
        return parse_content_file(file_name, data, max_bytes=self.max_upload_bytes)

    async def upload_content_data(
        self,
        page_id: Id,
        parsed_content: Optional[ContentInput],
        uploader: Optional[str],
        source_document_url: Optional[str] = None,
    ) -> ContentArtifactRecord:
        return await self.content.upload(page_id, parsed_content, uploader, source_document_url)

    async def get_latest_content_data(self, page_id: Id) -> Optional[ContentArtifactRecord]:
        return await self.content.latest(page_id)

    async def get_content_history(self, page_id: Id) -> List[ContentArtifactRecord]:
        return await self.content.history(page_id)

    async def correct_content_data(
        self,
        artifact_id: Id,
        editor: Optional[str],
        *,
        parsed_content: Optional[ContentInput] = None,
        source_document_url: Optional[str] = None,
    ) -> ContentArtifactRecord:
        return await self.content.correct(
            artifact_id,
            editor,
            content=parsed_content,
            source_document_url=source_document_url,
        )

    # --------------------------
    #  Analysis (read-only)
    # --------------------------
    async def get_latest_analysis(self, page_id: Id) -> Optional[AnalysisRecord]:
        return await self.analyses.get_latest(coerce_uuid(page_id, "page_id"))
