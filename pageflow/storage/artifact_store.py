from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Type, Union
from uuid import UUID

from loguru import logger
from tortoise import models
from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from pageflow.errors import ArtifactNotFound, ValidationError, VersionConflict
from pageflow.monitoring.metrics_server import ARTIFACT_UPLOADS, VERSION_CONFLICTS
from pageflow.records import ArtifactKind, ContentArtifactRecord, SeoArtifactRecord
from pageflow.storage import mapping
from pageflow.storage.models import ContentArtifact, SeoArtifact


ArtifactRecord = Union[SeoArtifactRecord, ContentArtifactRecord]

_MODELS: Dict[ArtifactKind, Type[models.Model]] = {
    ArtifactKind.SEO: SeoArtifact,
    ArtifactKind.CONTENT: ContentArtifact,
}

_MAPPERS: Dict[ArtifactKind, Callable[[Any], ArtifactRecord]] = {
    ArtifactKind.SEO: mapping.seo_record,
    ArtifactKind.CONTENT: mapping.content_record,
}


def _rows(kind: ArtifactKind, conn: Optional[BaseDBAsyncClient]):
    qs = _MODELS[kind].all()
    return qs.using_db(conn) if conn is not None else qs


class VersionedArtifactStore:
    """Append-only versions of one artifact kind per page.

    Versions for a (page, kind) pair start at 1 and grow by one. The storage
    layer's unique (page_id, version) constraint decides races: the loser gets
    :class:`VersionConflict`, never a duplicate or a silent overwrite.
    """

    async def get_latest(
        self,
        page_id: UUID,
        kind: ArtifactKind,
        *,
        using_db: Optional[BaseDBAsyncClient] = None,
    ) -> Optional[ArtifactRecord]:
        row = await _rows(kind, using_db).filter(page_id=page_id).order_by("-version").first()
        return _MAPPERS[kind](row) if row else None

    async def exists(
        self,
        page_id: UUID,
        kind: ArtifactKind,
        *,
        using_db: Optional[BaseDBAsyncClient] = None,
    ) -> bool:
        return await _rows(kind, using_db).filter(page_id=page_id).exists()

    async def history(self, page_id: UUID, kind: ArtifactKind) -> List[ArtifactRecord]:
        rows = await _rows(kind, None).filter(page_id=page_id).order_by("-version")
        return [_MAPPERS[kind](row) for row in rows]

    async def get(self, kind: ArtifactKind, artifact_id: UUID) -> ArtifactRecord:
        row = await _rows(kind, None).filter(id=artifact_id).first()
        if row is None:
            raise ArtifactNotFound(kind.value, artifact_id)
        return _MAPPERS[kind](row)

    async def insert_next(
        self,
        page_id: UUID,
        kind: ArtifactKind,
        payload: Dict[str, Any],
        uploader: str,
        *,
        using_db: Optional[BaseDBAsyncClient] = None,
    ) -> ArtifactRecord:
        latest = await self.get_latest(page_id, kind, using_db=using_db)
        version = (latest.version if latest else 0) + 1

        try:
            row = await _MODELS[kind].create(
                page_id=page_id,
                version=version,
                uploaded_by=uploader,
                using_db=using_db,
                **payload,
            )
        except IntegrityError as exc:
            VERSION_CONFLICTS.labels(kind=kind.value).inc()
            logger.warning(
                f"Version conflict writing {kind.value} v{version} for page {page_id}: {exc}"
            )
            raise VersionConflict(page_id, kind.value, version) from exc

        ARTIFACT_UPLOADS.labels(kind=kind.value).inc()
        logger.info(f"Stored {kind.value} v{version} for page {page_id} (by {uploader})")
        return _MAPPERS[kind](row)

    async def update_current(
        self,
        kind: ArtifactKind,
        artifact_id: UUID,
        changes: Dict[str, Any],
    ) -> ArtifactRecord:
        """Correct fields of the newest version in place; older versions are frozen."""
        if not changes:
            raise ValidationError("Nothing to correct.")
        model = _MODELS[kind]

        async with in_transaction() as conn:
            row = (
                await model.filter(id=artifact_id)
                .using_db(conn)
                .select_for_update()
                .first()
            )
            if row is None:
                raise ArtifactNotFound(kind.value, artifact_id)

            latest = await self.get_latest(row.page_id, kind, using_db=conn)
            if latest is None or latest.id != row.id:
                raise ValidationError(
                    f"Only the current {kind.value} version can be corrected; "
                    f"v{row.version} is historical. Upload a new version instead.",
                    field="version",
                )

            for name, value in changes.items():
                setattr(row, name, value)
            await row.save(using_db=conn, update_fields=list(changes))

        logger.info(f"Corrected {kind.value} v{row.version} for page {row.page_id} in place")
        return _MAPPERS[kind](row)
