from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID

from loguru import logger
from tortoise.transactions import in_transaction

from pageflow.errors import NotAuthenticated, ValidationError
from pageflow.monitoring.metrics_server import ARTIFACT_CORRECTIONS
from pageflow.records import ArtifactKind, PageRecord
from pageflow.storage.artifact_store import ArtifactRecord, VersionedArtifactStore
from pageflow.storage.page_store import PageStore
from pageflow.transitions import compute_status


def require_identity(user_id: Optional[str]) -> str:
    """Callers pass the acting user explicitly; nothing is read from ambient state."""
    if user_id is None or not str(user_id).strip():
        raise NotAuthenticated()
    return str(user_id).strip()


def coerce_uuid(value: Union[UUID, str, None], field: str) -> UUID:
    if isinstance(value, UUID):
        return value
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required.", field=field)
    try:
        return UUID(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field} '{value}' is not a valid id.", field=field) from None


class ArtifactManager:
    """Shared write path for SEO and content uploads.

    The artifact insert and the page status update run in one transaction on
    a locked page row: either both land or neither does.
    """

    kind: ArtifactKind

    def __init__(
        self,
        artifacts: Optional[VersionedArtifactStore] = None,
        pages: Optional[PageStore] = None,
    ) -> None:
        self.artifacts = artifacts or VersionedArtifactStore()
        self.pages = pages or PageStore()

    async def _commit(
        self, page_id: UUID, payload: Dict[str, Any], uploader: str
    ) -> Tuple[ArtifactRecord, PageRecord]:
        async with in_transaction() as conn:
            page = await self.pages.get(page_id, using_db=conn, for_update=True)
            record = await self.artifacts.insert_next(
                page.id, self.kind, payload, uploader, using_db=conn
            )

            has_seo = await self.artifacts.exists(page.id, ArtifactKind.SEO, using_db=conn)
            has_content = await self.artifacts.exists(
                page.id, ArtifactKind.CONTENT, using_db=conn
            )
            new_status = compute_status(page.status, has_seo, has_content)
            page = await self.pages.set_status(page, new_status, using_db=conn)

        return record, page

    async def latest(self, page_id: Union[UUID, str]) -> Optional[ArtifactRecord]:
        page_uuid = coerce_uuid(page_id, "page_id")
        return await self.artifacts.get_latest(page_uuid, self.kind)

    async def history(self, page_id: Union[UUID, str]) -> List[ArtifactRecord]:
        page_uuid = coerce_uuid(page_id, "page_id")
        await self.pages.get(page_uuid)
        return await self.artifacts.history(page_uuid, self.kind)

    async def _correct(
        self, artifact_id: Union[UUID, str], changes: Dict[str, Any], editor: str
    ) -> ArtifactRecord:
        artifact_uuid = coerce_uuid(artifact_id, "artifact_id")
        record = await self.artifacts.update_current(self.kind, artifact_uuid, changes)
        ARTIFACT_CORRECTIONS.labels(kind=self.kind.value).inc()
        logger.info(
            f"{editor} corrected {self.kind.value} v{record.version} of page {record.page_id}: "
            f"{', '.join(sorted(changes))}"
        )
        return record
