from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from loguru import logger
from tortoise import timezone
from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.exceptions import IntegrityError

from pageflow.errors import PageNotFound, ValidationError
from pageflow.monitoring.metrics_server import STATUS_TRANSITIONS
from pageflow.records import PageRecord, PageStatus
from pageflow.storage import mapping
from pageflow.storage.models import Page


def _pages(conn: Optional[BaseDBAsyncClient]):
    qs = Page.all()
    return qs.using_db(conn) if conn is not None else qs


def _slug_taken(slug: str) -> ValidationError:
    return ValidationError(
        f"A page with slug '{slug}' already exists in this project.", field="slug"
    )


class PageStore:
    async def get(
        self,
        page_id: UUID,
        *,
        using_db: Optional[BaseDBAsyncClient] = None,
        for_update: bool = False,
    ) -> PageRecord:
        qs = _pages(using_db).filter(id=page_id)
        if for_update:
            qs = qs.select_for_update()
        row = await qs.first()
        if row is None:
            raise PageNotFound(page_id)
        return mapping.page_record(row)

    async def list_for_project(self, project_id: UUID) -> List[PageRecord]:
        rows = await Page.filter(project_id=project_id).order_by("created_at", "slug")
        return [mapping.page_record(row) for row in rows]

    async def slug_exists(self, project_id: UUID, slug: str) -> bool:
        return await Page.filter(project_id=project_id, slug=slug.lower()).exists()

    async def create(self, project_id: UUID, name: str, slug: str) -> PageRecord:
        slug = slug.lower()
        if await self.slug_exists(project_id, slug):
            raise _slug_taken(slug)

        try:
            row = await Page.create(
                project_id=project_id,
                name=name,
                slug=slug,
                status=PageStatus.DRAFT,
            )
        except IntegrityError as exc:
            # lost a race against another create with the same slug
            raise _slug_taken(slug) from exc

        logger.info(f"Created page {row.id} ({slug}) in project {project_id}")
        return mapping.page_record(row)

    async def set_status(
        self,
        page: PageRecord,
        status: PageStatus,
        *,
        using_db: Optional[BaseDBAsyncClient] = None,
    ) -> PageRecord:
        if page.status is status:
            return page

        await _pages(using_db).filter(id=page.id).update(
            status=status,
            updated_at=timezone.now(),
        )
        STATUS_TRANSITIONS.labels(
            from_status=page.status.value, to_status=status.value
        ).inc()
        logger.info(f"Page {page.id} status {page.status.value} -> {status.value}")
        return await self.get(page.id, using_db=using_db)
