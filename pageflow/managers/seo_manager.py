from __future__ import annotations

from typing import Iterable, List, Optional, Union
from uuid import UUID

from loguru import logger

from pageflow.enrichment.keyword_metrics import EnrichmentJob
from pageflow.enrichment.queue import EnrichmentQueue
from pageflow.errors import ValidationError
from pageflow.managers.base import ArtifactManager, coerce_uuid, require_identity
from pageflow.records import ArtifactKind, SeoArtifactRecord
from pageflow.storage.artifact_store import VersionedArtifactStore
from pageflow.storage.page_store import PageStore


def clean_keywords(keywords: Optional[Iterable[str]], field: str) -> List[str]:
    if keywords is None:
        return []
    if isinstance(keywords, str):
        raise ValidationError(f"{field} must be a list of keywords.", field=field)
    return [str(k).strip() for k in keywords if k is not None and str(k).strip()]


def _require_keywords(primary: List[str], secondary: List[str]) -> None:
    if not primary and not secondary:
        raise ValidationError(
            "Provide at least one primary or secondary keyword.",
            field="primary_keywords",
        )


class SeoArtifactManager(ArtifactManager):
    kind = ArtifactKind.SEO

    def __init__(
        self,
        artifacts: Optional[VersionedArtifactStore] = None,
        pages: Optional[PageStore] = None,
        enrichment: Optional[EnrichmentQueue] = None,
    ) -> None:
        super().__init__(artifacts, pages)
        self.enrichment = enrichment

    async def upload(
        self,
        page_id: Union[UUID, str],
        primary_keywords: Optional[Iterable[str]],
        secondary_keywords: Optional[Iterable[str]],
        uploader: Optional[str],
    ) -> SeoArtifactRecord:
        uploader = require_identity(uploader)
        page_uuid = coerce_uuid(page_id, "page_id")
        primary = clean_keywords(primary_keywords, "primary_keywords")
        secondary = clean_keywords(secondary_keywords, "secondary_keywords")
        _require_keywords(primary, secondary)

        record, _ = await self._commit(
            page_uuid,
            {"primary_keywords": primary, "secondary_keywords": secondary},
            uploader,
        )
        self._schedule_enrichment(record)
        return record

    async def correct(
        self,
        artifact_id: Union[UUID, str],
        editor: Optional[str],
        *,
        primary_keywords: Optional[Iterable[str]] = None,
        secondary_keywords: Optional[Iterable[str]] = None,
    ) -> SeoArtifactRecord:
        editor = require_identity(editor)
        current = await self.artifacts.get(self.kind, coerce_uuid(artifact_id, "artifact_id"))

        changes = {}
        if primary_keywords is not None:
            changes["primary_keywords"] = clean_keywords(primary_keywords, "primary_keywords")
        if secondary_keywords is not None:
            changes["secondary_keywords"] = clean_keywords(secondary_keywords, "secondary_keywords")
        _require_keywords(
            changes.get("primary_keywords", current.primary_keywords),
            changes.get("secondary_keywords", current.secondary_keywords),
        )

        return await self._correct(current.id, changes, editor)

    def _schedule_enrichment(self, record: SeoArtifactRecord) -> None:
        if self.enrichment is None:
            logger.debug(f"No enrichment queue configured; skipping SEO artifact {record.id}")
            return

        job = EnrichmentJob(
            seo_artifact_id=record.id,
            page_id=record.page_id,
            version=record.version,
            primary_keywords=tuple(record.primary_keywords),
            secondary_keywords=tuple(record.secondary_keywords),
        )
        try:
            self.enrichment.submit(job)
        except Exception:
            # the upload already committed; enrichment must not undo that
            logger.exception(f"Could not schedule enrichment for SEO artifact {record.id}")
