from __future__ import annotations

from typing import Optional
from uuid import UUID

from pageflow.records import AnalysisRecord
from pageflow.storage import mapping
from pageflow.storage.models import AnalysisResult


class AnalysisStore:
    """Read-only view of results written by the external analysis service."""

    async def get_latest(self, page_id: UUID) -> Optional[AnalysisRecord]:
        row = (
            await AnalysisResult.filter(page_id=page_id)
            .order_by("-created_at")
            .first()
        )
        return mapping.analysis_record(row) if row else None
